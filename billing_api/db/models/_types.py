from sqlalchemy import BigInteger, Integer

# BIGSERIAL on Postgres; SQLite only autoincrements INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer(), "sqlite")

# Largest value a BIGINT column (and SQLite INTEGER) can hold.
BIGINT_MAX = 2**63 - 1


def fits_bigint(value: int) -> bool:
    return -BIGINT_MAX - 1 <= value <= BIGINT_MAX
