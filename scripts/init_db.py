from app.db.engine import get_engine
from app.db.schema import create_schema
from app.log import configure_logging


def main():
    configure_logging()
    create_schema(get_engine())
    print("DB schema ready.")

if __name__ == "__main__":
    main()
