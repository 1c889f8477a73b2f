"""
Create an account (e.g. the first admin). Run from project root:
  python -m guardroster.scripts.create_user EMAIL PASSWORD --name NAME [--role ADMIN|USER]
Example:
  python -m guardroster.scripts.create_user chef@wachdienst.de your-secure-password --name "Max Muster" --role ADMIN
"""
import argparse
import sys

from pydantic import ValidationError

from guardroster.core.database import SessionLocal
from guardroster.core.errors import ServiceError
from guardroster.core.roles import Role
from guardroster.schemas.user import UserCreate
from guardroster.services.users import create_principal


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Guard Roster account (no registration UI).")
    parser.add_argument("email", help="Email address used to log in")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument(
        "--role",
        default=Role.USER.value,
        choices=[r.value for r in Role],
        type=str.upper,
    )
    args = parser.parse_args(argv)

    try:
        payload = UserCreate(
            name=args.name, email=args.email, password=args.password, role=Role(args.role)
        )
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"])
            print(f"{field}: {err['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_principal(db, payload)
    except ServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.email}' with role '{user.role.value}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
