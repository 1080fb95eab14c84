import os
import sqlite3
import tempfile
import unittest

from application.locking import LockRegistry
from application.services import (
    close_account,
    create_user,
    deposit,
    find_account_by_id,
    find_user_by_id,
    transfer,
)
from domain.errors import ErrorCode
from domain.models import MAX_BALANCE, Account, AccountSettings, User
from infrastructure.db.account_repository_sqlite import SqliteAccountRepository
from infrastructure.db.user_repository_sqlite import SqliteUserRepository


class SqliteRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "bank.db")
        self.user_repo = SqliteUserRepository(self.db_path)
        self.account_repo = SqliteAccountRepository(self.db_path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_user_save_assigns_ids_and_finds_by_login(self):
        alice = self.user_repo.save(User(id=None, login="alice"))
        bob = self.user_repo.save(User(id=None, login="bob"))

        self.assertNotEqual(alice.id, bob.id)
        self.assertEqual(self.user_repo.find_by_login("bob").id, bob.id)
        self.assertEqual(self.user_repo.find_by_id(alice.id).login, "alice")
        self.assertIsNone(self.user_repo.find_by_login("carol"))
        self.assertIsNone(self.user_repo.find_by_id(999))
        self.assertEqual([u.login for u in self.user_repo.find_all()], ["alice", "bob"])

    def test_login_is_unique_in_storage(self):
        self.user_repo.save(User(id=None, login="alice"))
        with self.assertRaises(sqlite3.IntegrityError):
            self.user_repo.save(User(id=None, login="alice"))

    def test_account_crud(self):
        owner = self.user_repo.save(User(id=None, login="alice"))
        account = self.account_repo.save(Account(id=None, user_id=owner.id, balance=50))

        account.balance = 75
        self.account_repo.save(account)
        self.assertEqual(self.account_repo.find_by_id(account.id).balance, 75)
        self.assertEqual(self.account_repo.find_by_owner(owner.id), [account])
        self.assertEqual(self.account_repo.find_by_owner(owner.id + 1), [])

        self.account_repo.delete(account)
        self.assertIsNone(self.account_repo.find_by_id(account.id))
        self.assertEqual(self.account_repo.find_all(), [])

    def test_negative_balance_is_refused_by_storage(self):
        owner = self.user_repo.save(User(id=None, login="alice"))
        with self.assertRaises(sqlite3.IntegrityError):
            self.account_repo.save(Account(id=None, user_id=owner.id, balance=-1))

    def test_state_survives_new_repository_instances(self):
        owner = self.user_repo.save(User(id=None, login="alice"))
        self.account_repo.save(Account(id=None, user_id=owner.id, balance=10))

        reopened_users = SqliteUserRepository(self.db_path)
        reopened_accounts = SqliteAccountRepository(self.db_path)

        self.assertEqual(reopened_users.find_by_login("alice").id, owner.id)
        self.assertEqual(reopened_accounts.find_by_owner(owner.id)[0].balance, 10)

    def test_ledger_operations_on_sqlite(self):
        settings = AccountSettings(default_amount=1000, transfer_commission=0.1)
        locks = LockRegistry()
        a1 = create_user("a", self.user_repo, self.account_repo, settings, locks).value.account_ids[0]
        b = create_user("b", self.user_repo, self.account_repo, settings, locks).value
        b1 = b.account_ids[0]

        self.assertTrue(transfer(a1, b1, 100, self.account_repo, settings, locks).success)
        self.assertEqual(self.account_repo.find_by_id(a1).balance, 900)
        self.assertEqual(self.account_repo.find_by_id(b1).balance, 1090)

        b2 = self.account_repo.save(Account(id=None, user_id=b.id, balance=10))
        self.assertTrue(close_account(b2.id, self.account_repo, locks).success)
        self.assertEqual(self.account_repo.find_by_id(b1).balance, 1100)
        self.assertIsNone(self.account_repo.find_by_id(b2.id))

    def test_ids_beyond_64_bits_are_not_found(self):
        for missing in (2**63, 2**64, 0, -1):
            with self.subTest(id=missing):
                self.assertEqual(
                    find_account_by_id(missing, self.account_repo).error,
                    ErrorCode.ACCOUNT_NOT_FOUND,
                )
                self.assertEqual(
                    find_user_by_id(missing, self.user_repo, self.account_repo).error,
                    ErrorCode.USER_NOT_FOUND,
                )

    def test_amounts_beyond_64_bits_are_invalid(self):
        settings = AccountSettings(default_amount=1000, transfer_commission=0.1)
        locks = LockRegistry()
        a1 = create_user("a", self.user_repo, self.account_repo, settings, locks).value.account_ids[0]

        result = deposit(a1, 2**63, self.account_repo, locks)
        self.assertEqual(result.error, ErrorCode.INVALID_AMOUNT)
        result = deposit(2**63, 1, self.account_repo, locks)
        self.assertEqual(result.error, ErrorCode.ACCOUNT_NOT_FOUND)

        self.assertTrue(deposit(a1, MAX_BALANCE - 1000, self.account_repo, locks).success)
        self.assertEqual(self.account_repo.find_by_id(a1).balance, MAX_BALANCE)

        result = deposit(a1, 1, self.account_repo, locks)
        self.assertEqual(result.error, ErrorCode.INVALID_AMOUNT)
        self.assertEqual(self.account_repo.find_by_id(a1).balance, MAX_BALANCE)


if __name__ == "__main__":
    unittest.main()
