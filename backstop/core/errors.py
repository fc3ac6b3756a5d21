"""Error Hierarchy - typed, categorized exceptions for all Backstop failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are recoverable by the caller; infrastructure errors are critical
    - to_response() produces the uniform result envelope returned to the RPC boundary
    - No secret material (passphrase, seed, credential handle) ever appears in a message

Design Decisions:
    - Single hierarchy with BackstopError base: OperationDispatch catches all of them
      and nothing else (uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CREDENTIAL = "credential"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_index: int | None = None
    investor_index: int | None = None
    project_index: int | None = None
    asset_code: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class BackstopError(Exception):
    """Base exception for all Backstop errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def retryable(self) -> bool:
        """Only infrastructure hiccups are worth a caller-side re-invocation."""
        return self.category in (ErrorCategory.EXTERNAL_API, ErrorCategory.DATABASE)

    def to_response(self) -> dict:
        """Convert to the standardized error result envelope."""
        return {
            "status": "error",
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "entity_index": self.context.entity_index,
                    "investor_index": self.context.investor_index,
                    "project_index": self.context.project_index,
                    "asset_code": self.context.asset_code,
                },
            },
        }


# ─── Domain Errors ───────────────────────────────────────────────

class AuthorizationError(BackstopError):
    """Actor does not hold the role the operation requires."""
    def __init__(self, message: str, required_role: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_AUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context,
        )
        self.required_role = required_role


class NotFoundError(BackstopError):
    """Requested record does not exist."""
    def __init__(
        self, resource_type: str, resource_id: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidAmountError(BackstopError):
    """Amount argument is outside the accepted range."""
    def __init__(self, message: str, amount: object, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.amount = amount


class InsufficientFundsError(BackstopError):
    """Wallet balance cannot cover even the fee reserve."""
    def __init__(self, balance: object, fee_reserve: object, context: ErrorContext | None = None):
        super().__init__(
            f"Balance {balance} does not exceed the fee reserve {fee_reserve}",
            "INSUFFICIENT_FUNDS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )
        self.balance = balance
        self.fee_reserve = fee_reserve


class AssetConfigurationError(BackstopError):
    """Issued asset selected without an issuer and none configured for the platform."""
    def __init__(self, asset_code: str, context: ErrorContext | None = None):
        super().__init__(
            f"No issuer configured for asset {asset_code}",
            "ASSET_NOT_CONFIGURED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.asset_code = asset_code


class CredentialError(BackstopError):
    """Seed or credential handle could not be decrypted."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CREDENTIAL_INVALID", ErrorCategory.CREDENTIAL,
            ErrorSeverity.ERROR, context,
        )


# ─── Infrastructure Errors ───────────────────────────────────────

class LedgerQueryError(BackstopError):
    """Balance query against the ledger failed."""
    def __init__(self, message: str, public_key: str, context: ErrorContext | None = None):
        super().__init__(
            f"Ledger query failed: {message}",
            "LEDGER_QUERY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context,
        )
        self.public_key = public_key


class TransactionSubmissionError(BackstopError):
    """Ledger rejected the transfer or the submit call failed in transit."""
    def __init__(self, message: str, result_codes: dict | None = None, context: ErrorContext | None = None):
        super().__init__(
            f"Transaction submission failed: {message}",
            "TRANSACTION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context,
        )
        self.result_codes = result_codes


class DatabaseError(BackstopError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
