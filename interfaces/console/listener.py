from __future__ import annotations

import sys
from enum import Enum
from typing import List, Optional, TextIO

from application import services
from interfaces.commands import LedgerContext, dispatch


class ConsoleOperationType(str, Enum):
    USER_CREATE = "USER_CREATE"
    SHOW_ALL_USERS = "SHOW_ALL_USERS"
    ACCOUNT_CREATE = "ACCOUNT_CREATE"
    ACCOUNT_CLOSE = "ACCOUNT_CLOSE"
    ACCOUNT_DEPOSIT = "ACCOUNT_DEPOSIT"
    ACCOUNT_WITHDRAW = "ACCOUNT_WITHDRAW"
    ACCOUNT_TRANSFER = "ACCOUNT_TRANSFER"


# operation -> (command name, prompts for each argument)
_OPERATIONS = {
    ConsoleOperationType.USER_CREATE: ("create_user", ["Enter login for new user:"]),
    ConsoleOperationType.SHOW_ALL_USERS: ("users", []),
    ConsoleOperationType.ACCOUNT_CLOSE: ("close", ["Enter account id to close:"]),
    ConsoleOperationType.ACCOUNT_DEPOSIT: (
        "deposit",
        ["Enter account id:", "Enter amount to deposit:"],
    ),
    ConsoleOperationType.ACCOUNT_WITHDRAW: (
        "withdraw",
        ["Enter account id:", "Enter amount to withdraw:"],
    ),
    ConsoleOperationType.ACCOUNT_TRANSFER: (
        "transfer",
        [
            "Enter source account id:",
            "Enter destination account id:",
            "Enter amount to transfer:",
        ],
    ),
}


class OperationConsoleListener:
    """
    Interactive console front end.

    Reads an operation name per line, prompts for its arguments and prints
    the outcome. End of input stops the loop.
    """

    def __init__(
        self,
        ctx: LedgerContext,
        stdin: TextIO = sys.stdin,
        stdout: TextIO = sys.stdout,
    ) -> None:
        self._ctx = ctx
        self._in = stdin
        self._out = stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def _read_line(self) -> Optional[str]:
        line = self._in.readline()
        if line == "":
            return None
        return line.strip()

    def start(self) -> None:
        self._print("Console listener started")

    def end_listen(self) -> None:
        self._print("Console listener end listen")

    def listen_updates(self) -> None:
        while True:
            operation = self._listen_next_operation()
            if operation is None:
                return
            self._process_operation(operation)

    def _listen_next_operation(self) -> Optional[ConsoleOperationType]:
        while True:
            self._print("\nPlease type next operation:")
            for op in ConsoleOperationType:
                self._print(op.value)
            self._print()

            line = self._read_line()
            if line is None:
                return None
            try:
                return ConsoleOperationType(line)
            except ValueError:
                self._print("No such operation type")

    def _ask(self, prompts: List[str]) -> Optional[List[str]]:
        answers = []
        for prompt in prompts:
            self._print(prompt)
            line = self._read_line()
            if line is None:
                return None
            answers.append(line)
        return answers

    def _process_operation(self, operation: ConsoleOperationType) -> None:
        if operation is ConsoleOperationType.ACCOUNT_CREATE:
            self._create_account_for_user_id()
            return

        command, prompts = _OPERATIONS[operation]
        args = self._ask(prompts)
        if args is None:
            return
        self._print(dispatch(command, args, self._ctx))

    def _create_account_for_user_id(self) -> None:
        args = self._ask(["Enter the user id for which to create an account:"])
        if args is None:
            return
        try:
            user_id = int(args[0])
        except ValueError:
            self._print(f"Error execute command {ConsoleOperationType.ACCOUNT_CREATE.value}: "
                        f"user id must be a number")
            return

        found = services.find_user_by_id(user_id, self._ctx.user_repo, self._ctx.account_repo)
        if not found.success:
            self._print(found.error_message)
            return
        self._print(dispatch("create_account", [found.value.login], self._ctx))
