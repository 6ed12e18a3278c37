import argparse
import getpass
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database import SessionLocal, init_db
from models.users import User
from utils.hashing import get_password_hash


def create_user(session, email: str, password: str, username: str = None) -> User:
    """Insert one back-office account. Raises ValueError if the e-mail is taken."""
    email = email.strip().lower()
    if session.query(User).filter(User.email == email).first():
        raise ValueError(f"User {email} already exists")

    user = User(email=email, password_hash=get_password_hash(password), username=username)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create a back-office user")
    parser.add_argument("email")
    parser.add_argument("--username", default=None)
    parser.add_argument("--password", default=None, help="prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("Hasło musi mieć co najmniej 6 znaków.")
        return 1

    init_db()
    session = SessionLocal()
    try:
        user = create_user(session, args.email, password, args.username)
    except ValueError as e:
        print(e)
        return 1
    finally:
        session.close()

    print(f"User {user.email} created (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
