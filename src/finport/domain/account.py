"""Account domain service."""

from typing import Optional
from finport.database.base import Database
from finport.domain import errors
from finport.domain.entities import Account as AccountEntity


class AccountService:
    """Service for managing an owner's accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, owner_id: str, name: str, bank_name: str) -> int:
        """Create a new account.

        Args:
            owner_id: Owner of the account
            name: Account name
            bank_name: Bank name

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the owner already has an account with that name
        """
        name = name.strip()
        if not name:
            raise errors.ValidationError("Account name cannot be empty")

        for acc in self.db.list_accounts(owner_id):
            if acc.name == name:
                raise errors.ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(owner_id=owner_id, name=name, bank_name=bank_name)

    def get_account(self, owner_id: str, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID, or None if the owner has no such account."""
        return self.db.get_account(owner_id, account_id)

    def require_account(self, owner_id: str, account_id: int) -> AccountEntity:
        """Get account by ID.

        Raises:
            NotFoundError: If the owner has no such account
        """
        account = self.db.get_account(owner_id, account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))
        return account

    def list_accounts(self, owner_id: str) -> list[AccountEntity]:
        """List the owner's accounts."""
        return self.db.list_accounts(owner_id)
