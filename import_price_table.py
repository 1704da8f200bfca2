import json
import sys
import psycopg2
from hvacops.core.config import settings
from urllib.parse import urlparse


def import_price_table(path: str) -> bool:
    """Upsert SET model rows (and replace their components) from a JSON file.

    The file holds a list of objects shaped like the ``POST /price-table/`` body.
    """
    try:
        with open(path, encoding="utf-8") as f:
            rows = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error reading {path}: {e}")
        return False

    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )

        cursor = conn.cursor()
        created = updated = 0

        for row in rows:
            cursor.execute("SELECT id FROM price_table WHERE model = %s", (row["model"],))
            existing = cursor.fetchone()

            if existing:
                row_id = existing[0]
                cursor.execute(
                    "UPDATE price_table SET category = %s, size = %s, price = %s, updated_at = now() WHERE id = %s",
                    (row["category"], row.get("size"), row["price"], row_id)
                )
                cursor.execute("DELETE FROM price_table_components WHERE price_table_id = %s", (row_id,))
                updated += 1
            else:
                cursor.execute(
                    "INSERT INTO price_table (category, model, size, price, created_at) "
                    "VALUES (%s, %s, %s, %s, now()) RETURNING id",
                    (row["category"], row["model"], row.get("size"), row["price"])
                )
                row_id = cursor.fetchone()[0]
                created += 1

            for component in row.get("components", []):
                cursor.execute(
                    "INSERT INTO price_table_components "
                    "(price_table_id, model, type, unit_price, sale_price, quantity, created_at) "
                    "VALUES (%s, %s, %s, %s, %s, %s, now())",
                    (
                        row_id,
                        component["model"],
                        component["type"],
                        component.get("unit_price", 0.0),
                        component.get("sale_price", 0.0),
                        component.get("quantity", 1),
                    )
                )

        conn.commit()

        print(f"Price table imported: {created} created, {updated} updated")

        cursor.close()
        conn.close()
        return True

    except (psycopg2.Error, KeyError) as e:
        print(f"Error importing price table: {str(e)}")
        return False


def main():
    if len(sys.argv) < 2:
        print("Usage: python import_price_table.py <price_table.json>")
        sys.exit(1)

    success = import_price_table(sys.argv[1])
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
