# ===============================================================
# migrations/init_schema_v1.py
# Creates ALL storefront tables from models.py (idempotent)
# Safe to run on a fresh Postgres / Supabase DB.
# ===============================================================
import os
import json
from datetime import datetime, timezone
import psycopg2

MIGRATION_NAME = "init_schema_v1"


def main():
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL not found in env")
        return

    # psycopg2 needs sync URL
    if database_url.startswith("postgresql+asyncpg://"):
        database_url = database_url.replace("postgresql+asyncpg://", "postgresql://", 1)

    conn = psycopg2.connect(database_url, sslmode=os.environ.get("PGSSLMODE", "require"))
    cur = conn.cursor()

    try:
        # -------------------------------------------------------
        # 0) schema_migrations table
        # -------------------------------------------------------
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                meta JSONB DEFAULT '{}'::jsonb
            );
            """
        )

        # Stop if already applied
        cur.execute("SELECT 1 FROM schema_migrations WHERE name=%s LIMIT 1;", (MIGRATION_NAME,))
        if cur.fetchone():
            print(f"✅ Migration already applied: {MIGRATION_NAME}")
            return

        print(f"🔧 Starting migration: {MIGRATION_NAME}")

        # USERS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id VARCHAR(64) PRIMARY KEY,
                email VARCHAR(255) UNIQUE,
                first_name VARCHAR(120),
                last_name VARCHAR(120),
                profile_image_url TEXT,
                is_admin BOOLEAN NOT NULL DEFAULT FALSE,
                spins_remaining INTEGER NOT NULL DEFAULT 0
                    CONSTRAINT check_spins_remaining_non_negative CHECK (spins_remaining >= 0),
                total_spins_used INTEGER NOT NULL DEFAULT 0
                    CONSTRAINT check_total_spins_used_non_negative CHECK (total_spins_used >= 0),
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc'),
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        print("✅ users ensured")

        # PRIZES
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS prizes (
                id SERIAL PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                description TEXT,
                type VARCHAR(50) NOT NULL
                    CONSTRAINT check_prize_type
                    CHECK (type IN ('free_gold','free_silver','combo','discount')),
                value DOUBLE PRECISION NOT NULL,
                gold_grams DOUBLE PRECISION NOT NULL DEFAULT 0,
                silver_grams DOUBLE PRECISION NOT NULL DEFAULT 0,
                probability DOUBLE PRECISION NOT NULL DEFAULT 10,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                color VARCHAR(20) DEFAULT '#DC2626',
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc'),
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        print("✅ prizes ensured")

        # COUPONS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS coupons (
                id SERIAL PRIMARY KEY,
                code VARCHAR(20) NOT NULL UNIQUE,
                user_id VARCHAR(64) NOT NULL REFERENCES users(id),
                prize_id INTEGER NOT NULL REFERENCES prizes(id),
                value DOUBLE PRECISION NOT NULL,
                gold_grams DOUBLE PRECISION NOT NULL DEFAULT 0,
                silver_grams DOUBLE PRECISION NOT NULL DEFAULT 0,
                is_redeemed BOOLEAN NOT NULL DEFAULT FALSE,
                redeemed_at TIMESTAMP,
                expires_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_coupons_user_id ON coupons (user_id);")
        print("✅ coupons ensured")

        # WHEEL SPINS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS wheel_spins (
                id SERIAL PRIMARY KEY,
                user_id VARCHAR(64) NOT NULL REFERENCES users(id),
                prize_id INTEGER NOT NULL REFERENCES prizes(id),
                coupon_id INTEGER REFERENCES coupons(id),
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_wheel_spins_user_id ON wheel_spins (user_id);")
        print("✅ wheel_spins ensured")

        # SPIN PURCHASES
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS spin_purchases (
                id SERIAL PRIMARY KEY,
                user_id VARCHAR(64) NOT NULL REFERENCES users(id),
                tx_ref VARCHAR(64) NOT NULL UNIQUE,
                amount DOUBLE PRECISION NOT NULL,
                spins_credited INTEGER NOT NULL,
                status VARCHAR(20) NOT NULL DEFAULT 'successful'
                    CONSTRAINT check_spin_purchase_status
                    CHECK (status IN ('pending','successful','failed')),
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_spin_purchases_user_id ON spin_purchases (user_id);")
        print("✅ spin_purchases ensured")

        # PRODUCTS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS products (
                id SERIAL PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                description TEXT,
                category VARCHAR(50) NOT NULL,
                price_per_gram DOUBLE PRECISION NOT NULL,
                weight_grams DOUBLE PRECISION NOT NULL,
                total_price DOUBLE PRECISION NOT NULL,
                image_url TEXT,
                in_stock BOOLEAN NOT NULL DEFAULT TRUE,
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc'),
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        print("✅ products ensured")

        # ORDERS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS orders (
                id SERIAL PRIMARY KEY,
                user_id VARCHAR(64) NOT NULL REFERENCES users(id),
                product_id INTEGER NOT NULL REFERENCES products(id),
                coupon_id INTEGER REFERENCES coupons(id),
                original_price DOUBLE PRECISION NOT NULL,
                discount_amount DOUBLE PRECISION NOT NULL DEFAULT 0,
                final_price DOUBLE PRECISION NOT NULL
                    CONSTRAINT check_order_final_price CHECK (final_price >= 0),
                status VARCHAR(50) NOT NULL DEFAULT 'pending'
                    CONSTRAINT check_order_status
                    CHECK (status IN ('pending','paid','completed','cancelled')),
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc'),
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_orders_user_id ON orders (user_id);")
        cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS uq_orders_coupon_id ON orders (coupon_id);")
        print("✅ orders ensured")

        # WHEEL CONFIG
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS wheel_config (
                id SERIAL PRIMARY KEY,
                entry_price DOUBLE PRECISION NOT NULL DEFAULT 10,
                spins_per_entry INTEGER NOT NULL DEFAULT 2,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        print("✅ wheel_config ensured")

        # SUPPORT REQUESTS
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS support_requests (
                id SERIAL PRIMARY KEY,
                user_id VARCHAR(64) NOT NULL REFERENCES users(id),
                type VARCHAR(50) NOT NULL
                    CONSTRAINT check_support_request_type
                    CHECK (type IN ('customization','inquiry')),
                image_url TEXT,
                description TEXT,
                gold_weight_estimate DOUBLE PRECISION,
                contact_phone VARCHAR(20),
                status VARCHAR(50) NOT NULL DEFAULT 'pending'
                    CONSTRAINT check_support_request_status
                    CHECK (status IN ('pending','contacted','completed','cancelled')),
                admin_notes TEXT,
                created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc'),
                updated_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS ix_support_requests_user_id ON support_requests (user_id);")
        print("✅ support_requests ensured")

        # -------------------------------------------------------
        # Record migration
        # -------------------------------------------------------
        cur.execute(
            "INSERT INTO schema_migrations (name, meta) VALUES (%s, %s::jsonb)",
            (
                MIGRATION_NAME,
                json.dumps(
                    {
                        "applied_by": "init_schema_v1",
                        "applied_at": datetime.now(timezone.utc).isoformat(),
                        "notes": "Created all storefront tables from models.py",
                    }
                ),
            ),
        )

        conn.commit()
        print("🎉 Migration applied successfully!")

    except Exception as e:
        conn.rollback()
        print("❌ Migration failed — rolled back")
        print("Error:", e)
        raise
    finally:
        cur.close()
        conn.close()


if __name__ == "__main__":
    main()
