from sqlalchemy.orm import declarative_base

# Legacy schema: tables keep their historical primary keys and column names,
# so models derive from Base directly instead of a shared id/audit mixin.
Base = declarative_base()
