import argparse
import os
import sys

import pandas as pd

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database import SessionLocal, init_db
from models.users import User
from utils.hashing import get_password_hash

REQUIRED_COLUMNS = {"email", "password"}


def load_users(csv_path: str) -> pd.DataFrame:
    """Read email,password[,username] rows, dropping blanks and duplicate e-mails."""
    df = pd.read_csv(csv_path, dtype=str)
    df.columns = [c.strip().lower() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {', '.join(sorted(missing))}")

    if "username" not in df.columns:
        df["username"] = None
    df["email"] = df["email"].str.strip().str.lower()
    df = df.dropna(subset=["email", "password"])
    df = df[df["email"] != ""]
    return df.drop_duplicates(subset="email", keep="first")


def bulk_insert(session, df: pd.DataFrame) -> dict:
    """Insert every row whose e-mail is not in the database yet."""
    existing = {email for (email,) in session.query(User.email).filter(User.email.in_(df["email"].tolist())).all()}
    created, skipped = 0, 0

    for row in df.itertuples(index=False):
        if row.email in existing:
            print(f"User {row.email} already exists, skipping...")
            skipped += 1
            continue
        username = row.username if isinstance(row.username, str) and row.username.strip() else None
        session.add(User(email=row.email, password_hash=get_password_hash(row.password), username=username))
        created += 1

    session.commit()
    return {"created": created, "skipped": skipped}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Insert back-office users from a CSV file")
    parser.add_argument("csv_path", help="CSV with columns email,password[,username]")
    args = parser.parse_args(argv)

    try:
        df = load_users(args.csv_path)
    except FileNotFoundError:
        print(f"Błąd: Nie znaleziono pliku {args.csv_path}.")
        return 1
    except ValueError as e:
        print(f"Błąd: {e}")
        return 1

    init_db()
    session = SessionLocal()
    try:
        result = bulk_insert(session, df)
    finally:
        session.close()

    print(f"Bulk insert completed! created={result['created']} skipped={result['skipped']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
