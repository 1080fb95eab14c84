import io
import unittest

from domain.models import AccountSettings
from infrastructure.memory.repositories import (
    InMemoryAccountRepository,
    InMemoryUserRepository,
)
from interfaces.commands import (
    FAILURE_REPLY,
    LedgerContext,
    dispatch,
    safe_dispatch,
    usage_lines,
)
from interfaces.console.listener import OperationConsoleListener


def _ledger() -> LedgerContext:
    return LedgerContext(
        InMemoryUserRepository(),
        InMemoryAccountRepository(),
        AccountSettings(default_amount=1000, transfer_commission=0.1),
    )


class DispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ctx = _ledger()

    def test_create_user_and_show(self):
        reply = dispatch("create_user", ["alice"], self.ctx)
        self.assertEqual(reply, "User created: User(id=1, login=alice, accounts=[1])")

        self.assertEqual(
            dispatch("user", ["1"], self.ctx),
            "User(id=1, login=alice, accounts=[1])",
        )
        self.assertEqual(
            dispatch("account", ["1"], self.ctx),
            "Account(id=1, userId=1, balance=1000)",
        )

    def test_duplicate_login_message(self):
        dispatch("create_user", ["alice"], self.ctx)
        reply = dispatch("create_user", ["alice"], self.ctx)
        self.assertEqual(reply, "User already exists with login = alice")

    def test_money_commands(self):
        dispatch("create_user", ["alice"], self.ctx)
        dispatch("create_user", ["bob"], self.ctx)

        self.assertEqual(
            dispatch("deposit", ["1", "50"], self.ctx),
            "Successfully deposited amount=50 to account id=1",
        )
        self.assertEqual(
            dispatch("withdraw", ["1", "20"], self.ctx),
            "Successfully withdrawn amount=20 from account id=1",
        )
        self.assertEqual(
            dispatch("transfer", ["1", "2", "100"], self.ctx),
            "Successfully transferred 100 from account id 1 to account id 2",
        )
        self.assertEqual(
            dispatch("account", ["2"], self.ctx),
            "Account(id=2, userId=2, balance=1090)",
        )
        self.assertIn("Cannot withdraw", dispatch("withdraw", ["1", "5000"], self.ctx))

    def test_create_account_accounts_and_close(self):
        dispatch("create_user", ["alice"], self.ctx)
        self.assertEqual(
            dispatch("create_account", ["alice"], self.ctx),
            "New account created with id: 2 for user: alice",
        )
        self.assertEqual(
            dispatch("accounts", ["1"], self.ctx),
            "Account(id=1, userId=1, balance=1000)\nAccount(id=2, userId=1, balance=1000)",
        )
        self.assertEqual(
            dispatch("close", ["2"], self.ctx),
            "Account successfully closed with id=2",
        )
        self.assertEqual(
            dispatch("close", ["1"], self.ctx),
            "Cannot close the only one account",
        )

    def test_users_listing(self):
        self.assertEqual(dispatch("users", [], self.ctx), "No users yet.")
        dispatch("create_user", ["alice"], self.ctx)
        self.assertEqual(
            dispatch("users", [], self.ctx),
            "List of all users:\nUser(id=1, login=alice, accounts=[1])",
        )

    def test_bad_arguments_return_usage(self):
        self.assertEqual(
            dispatch("deposit", ["1"], self.ctx),
            "Usage: deposit <account_id> <amount>",
        )
        self.assertEqual(
            dispatch("transfer", ["a", "b", "c"], self.ctx),
            "Usage: transfer <from_account_id> <to_account_id> <amount>",
        )
        self.assertEqual(dispatch("create_user", [], self.ctx), "Usage: create_user <login>")

    def test_unknown_command(self):
        self.assertEqual(dispatch("steal", [], self.ctx), "Unknown command: steal")

    def test_usage_lines_prefix(self):
        lines = usage_lines("/")
        self.assertIn("/close <account_id>", lines)
        self.assertTrue(all(line.startswith("/") for line in lines))

class BrokenAccountRepository(InMemoryAccountRepository):
    def find_by_id(self, account_id):
        raise RuntimeError("database is locked")


class SafeDispatchTests(unittest.TestCase):
    def test_storage_errors_get_a_generic_reply(self):
        ctx = LedgerContext(
            InMemoryUserRepository(),
            BrokenAccountRepository(),
            AccountSettings(default_amount=1000, transfer_commission=0.1),
        )

        with self.assertLogs("interfaces.commands", level="ERROR") as logs:
            reply = safe_dispatch("account", ["1"], ctx)

        self.assertEqual(reply, FAILURE_REPLY)
        self.assertIn("Command 'account' ['1'] failed", logs.output[0])

        with self.assertRaises(RuntimeError):
            dispatch("account", ["1"], ctx)

    def test_normal_commands_pass_through(self):
        ctx = _ledger()
        self.assertIn("User created", safe_dispatch("create_user", ["alice"], ctx))
        self.assertEqual(safe_dispatch("deposit", ["x"], ctx), dispatch("deposit", ["x"], ctx))
        self.assertEqual(safe_dispatch("nope", [], ctx), "Unknown command: nope")


class ConsoleListenerTests(unittest.TestCase):
    def _run(self, ctx: LedgerContext, *lines: str) -> str:
        stdin = io.StringIO("".join(line + "\n" for line in lines))
        stdout = io.StringIO()
        OperationConsoleListener(ctx, stdin=stdin, stdout=stdout).listen_updates()
        return stdout.getvalue()

    def test_full_session(self):
        ctx = _ledger()
        output = self._run(
            ctx,
            "USER_CREATE", "alice",
            "USER_CREATE", "bob",
            "ACCOUNT_CREATE", "1",
            "ACCOUNT_DEPOSIT", "1", "10",
            "ACCOUNT_WITHDRAW", "2", "1",
            "ACCOUNT_TRANSFER", "1", "3", "100",
            "ACCOUNT_CLOSE", "3",
            "SHOW_ALL_USERS",
        )

        self.assertIn("Enter login for new user:", output)
        self.assertIn("User created: User(id=1, login=alice, accounts=[1])", output)
        self.assertIn("New account created with id: 3 for user: alice", output)
        self.assertIn("Successfully deposited amount=10 to account id=1", output)
        self.assertIn("Successfully withdrawn amount=1 from account id=2", output)
        self.assertIn("Successfully transferred 100 from account id 1 to account id 3", output)
        self.assertIn("Account successfully closed with id=3", output)
        self.assertIn("User(id=1, login=alice, accounts=[1])", output)
        self.assertEqual(ctx.account_repo.find_by_id(1).balance, 2010)

    def test_unknown_operation(self):
        output = self._run(_ledger(), "FLY_TO_MOON")
        self.assertIn("No such operation type", output)

    def test_account_create_for_unknown_user(self):
        output = self._run(_ledger(), "ACCOUNT_CREATE", "9")
        self.assertIn("User with id = 9 not found", output)

    def test_account_create_with_bad_id(self):
        output = self._run(_ledger(), "ACCOUNT_CREATE", "nine")
        self.assertIn("user id must be a number", output)

    def test_input_ends_mid_operation(self):
        ctx = _ledger()
        output = self._run(ctx, "ACCOUNT_TRANSFER", "1")
        self.assertIn("Enter destination account id:", output)
        self.assertEqual(ctx.account_repo.find_all(), [])


if __name__ == "__main__":
    unittest.main()
