import pytest

from models.users import User
from scripts.bulk_insert_users import bulk_insert, load_users
from scripts.create_user import create_user
from utils.hashing import verify_password


def test_create_user_script(db_session):
    user = create_user(db_session, " Caissier@Bebe-Depot.com ", "Caisse@2024", "caisse")

    assert user.email == "caissier@bebe-depot.com"
    assert verify_password("Caisse@2024", user.password_hash)

    with pytest.raises(ValueError):
        create_user(db_session, "caissier@bebe-depot.com", "other-password")


def test_bulk_insert_skips_existing_and_duplicates(db_session, user, tmp_path):
    csv_path = tmp_path / "users.csv"
    csv_path.write_text(
        "email,password,username\n"
        "admin@bebe-depot.com,Admin@2024,admin\n"
        "user@bebe-depot.com,User@2024,user\n"
        "USER@bebe-depot.com,Other@2024,dup\n"
        "vendeur@bebe-depot.com,Vente@2024,\n",
        encoding="utf-8",
    )

    df = load_users(str(csv_path))
    result = bulk_insert(db_session, df)

    assert result == {"created": 2, "skipped": 1}
    emails = sorted(e for (e,) in db_session.query(User.email).all())
    assert emails == ["admin@bebe-depot.com", "user@bebe-depot.com", "vendeur@bebe-depot.com"]
    seller = db_session.query(User).filter(User.email == "vendeur@bebe-depot.com").one()
    assert seller.username is None


def test_bulk_insert_requires_columns(tmp_path):
    csv_path = tmp_path / "users.csv"
    csv_path.write_text("mail,pass\nx@example.com,secret\n", encoding="utf-8")

    with pytest.raises(ValueError, match="email, password"):
        load_users(str(csv_path))
