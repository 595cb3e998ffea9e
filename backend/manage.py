import asyncio
import typer
from sqlalchemy.ext.asyncio import AsyncSession

import authorhaven.db_models  # noqa: F401

from authorhaven.database import async_session_factory
from authorhaven.exceptions import DomainError
from authorhaven.users.schema import UserCreate
from authorhaven.users import service as user_service
from authorhaven.auth import service as auth_service

cli = typer.Typer()


async def create_user_runner(email: str, username: str, password: str, db: AsyncSession):
    """메일 인증 없이 바로 로그인 가능한 계정을 만듭니다."""
    print("--- User Creation ---")
    try:
        user_data = UserCreate(email=email, username=username, password=password)
        print(f"Creating user '{email}'...")
        user = await user_service.create_user(user_data, db, activated=True)

        print("\n✅ User created successfully!")
        print(f"   ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Username: {user.username}")
    except DomainError as e:
        print(f"\n❌ Error creating user: {e.message}")
        raise typer.Exit(code=1)
    finally:
        print("--- Task Finished ---")


@cli.command(name="create-user")
def create_user(
    email: str = typer.Option(..., "--email", "-e", help="User's email address."),
    username: str = typer.Option(..., "--username", "-u", help="Public username."),
    password: str = typer.Option(..., "--password", "-p", help="At least 8 characters."),
):
    """
    Creates an already activated local account.
    """
    async def main():
        async with async_session_factory() as session:
            await create_user_runner(email=email, username=username, password=password, db=session)

    asyncio.run(main())


@cli.command(name="activate-user")
def activate_user(user_id: int = typer.Argument(..., help="ID of the account to activate.")):
    """Flips the activation flag without the email link."""
    async def main():
        async with async_session_factory() as session:
            try:
                user = await user_service.activate_user(user_id, session)
            except DomainError as e:
                print(f"❌ {e.message}")
                raise typer.Exit(code=1)
            print(f"✅ Activated {user}")

    asyncio.run(main())


@cli.command(name="purge-tokens")
def purge_tokens():
    """Deletes revoked tokens whose original expiry has passed."""
    async def main():
        async with async_session_factory() as session:
            removed = await auth_service.purge_expired_tokens(session)
            print(f"✅ Purged {removed} expired tokens")

    asyncio.run(main())


if __name__ == "__main__":
    cli()
