"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet
  3xxx: Tournament
  4xxx: Transaction
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class PhoneExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Phone number already registered", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class ForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Admin access required", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: int) -> None:
        super().__init__(1006, f"User not found: {user_id}", 404)


# --- 2xxx: Wallet ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class WalletNotFoundError(AppError):
    def __init__(self, user_id: int) -> None:
        super().__init__(2002, f"Wallet not found for user {user_id}", 404)


class InvalidAmountError(AppError):
    def __init__(self, amount: Decimal) -> None:
        super().__init__(2003, f"Amount must be positive: {amount}", 422)


class InvalidPaymentMethodError(AppError):
    def __init__(self, method: str) -> None:
        super().__init__(2004, f"Unsupported payment method: {method}", 422)


# --- 3xxx: Tournament ---

class TournamentNotFoundError(AppError):
    def __init__(self, tournament_id: int) -> None:
        super().__init__(3001, f"Tournament not found: {tournament_id}", 404)


class TournamentFullError(AppError):
    def __init__(self, tournament_id: int) -> None:
        super().__init__(3002, f"Tournament is full: {tournament_id}", 409)


class AlreadyRegisteredError(AppError):
    def __init__(self, tournament_id: int) -> None:
        super().__init__(
            3003, f"Already registered for tournament {tournament_id}", 409
        )


class NoUpcomingTournamentError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "No upcoming tournaments found", 404)


# --- 4xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: int) -> None:
        super().__init__(4001, f"Transaction not found: {transaction_id}", 404)


class InvalidStateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Invalid transaction state: {detail}", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
