"""geocode_0001_init

Create schema and tables:
- geocode.provider_configs
- geocode.parameters
- geocode.geocode_executions
"""

from alembic import op

revision = "geocode_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE SCHEMA IF NOT EXISTS "geocode"')
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS geocode.provider_configs (
          id SERIAL PRIMARY KEY,
          name VARCHAR(100) NOT NULL UNIQUE,
          endpoint VARCHAR(2048) NOT NULL,
          api_key VARCHAR(512) NOT NULL DEFAULT '',
          endpoint_parameters_json TEXT NOT NULL DEFAULT '{}',
          priority INTEGER NOT NULL DEFAULT 1,
          created_at VARCHAR(64) NOT NULL,
          created_by VARCHAR(128) NOT NULL,
          updated_at VARCHAR(64) NULL,
          updated_by VARCHAR(128) NULL
        )
        """
    )
    op.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_provider_configs_name_lower "
        "ON geocode.provider_configs (LOWER(name))"
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS geocode.parameters (
          id SERIAL PRIMARY KEY,
          name VARCHAR(100) NOT NULL UNIQUE,
          value TEXT NOT NULL,
          description VARCHAR(512) NULL,
          category VARCHAR(64) NOT NULL DEFAULT 'general',
          created_at VARCHAR(64) NOT NULL,
          updated_at VARCHAR(64) NULL
        )
        """
    )
    op.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_parameters_name_lower "
        "ON geocode.parameters (LOWER(name))"
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS geocode.geocode_executions (
          id BIGSERIAL PRIMARY KEY,
          operation VARCHAR(32) NOT NULL,
          address VARCHAR(512) NOT NULL,
          parameters_json TEXT NOT NULL DEFAULT '{}',
          succeeded BOOLEAN NOT NULL,
          error_message TEXT NULL,
          result_count INTEGER NOT NULL DEFAULT 0,
          duration_ms DOUBLE PRECISION NOT NULL,
          trace_id VARCHAR(64) NOT NULL DEFAULT '',
          created_at VARCHAR(64) NOT NULL
        )
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_geocode_executions_created_at "
        "ON geocode.geocode_executions (created_at)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS geocode.geocode_executions")
    op.execute("DROP TABLE IF EXISTS geocode.parameters")
    op.execute("DROP TABLE IF EXISTS geocode.provider_configs")
