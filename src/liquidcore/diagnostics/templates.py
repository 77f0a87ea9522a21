"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    This provides:
        - Testable error messages
        - Consistent formatting
        - Documentation of all error cases
    """

    # Base documentation URL
    _DOCS_BASE = "https://shopify.github.io/liquid/basics"

    @staticmethod
    def scope_depth_exceeded(max_depth: int) -> Diagnostic:
        """Scope stack grew beyond its maximum depth.

        Args:
            max_depth: The configured maximum number of scopes

        Returns:
            Diagnostic for SCOPE_DEPTH_EXCEEDED
        """
        return Diagnostic(
            code=DiagnosticCode.SCOPE_DEPTH_EXCEEDED,
            message="Nesting too deep",
            hint=(
                f"Templates may nest at most {max_depth} scopes; "
                "check for recursive includes or unbounded loops"
            ),
            scope_depth=max_depth,
        )

    @staticmethod
    def scope_unbalanced() -> Diagnostic:
        """Pop attempted on a stack holding only the outer scope.

        Returns:
            Diagnostic for SCOPE_UNBALANCED
        """
        return Diagnostic(
            code=DiagnosticCode.SCOPE_UNBALANCED,
            message="Cannot pop the outermost scope",
            hint="Every pop() must be paired with an earlier push(); prefer scoped()",
            scope_depth=1,
        )

    @staticmethod
    def invalid_filter_module(received_type: str) -> Diagnostic:
        """Filter registration received something other than a module.

        Args:
            received_type: Type name of the rejected value

        Returns:
            Diagnostic for INVALID_FILTER_MODULE
        """
        msg = f"Expected module but got: {received_type}"
        return Diagnostic(
            code=DiagnosticCode.INVALID_FILTER_MODULE,
            message=msg,
            hint="Pass a Python module or a class whose public functions are filters",
        )

    @staticmethod
    def unknown_resource_counter(key: str, known: list[str]) -> Diagnostic:
        """Resource counter name is not one of the tracked counters.

        Args:
            key: The rejected counter name
            known: Valid counter names

        Returns:
            Diagnostic for UNKNOWN_RESOURCE_COUNTER
        """
        msg = f"Unknown resource counter '{key}'"
        return Diagnostic(
            code=DiagnosticCode.UNKNOWN_RESOURCE_COUNTER,
            message=msg,
            hint=f"Use one of: {', '.join(known)}",
        )

    @staticmethod
    def filter_not_found(filter_name: str) -> Diagnostic:
        """Filter name has no registered implementation.

        Args:
            filter_name: The filter that was invoked

        Returns:
            Diagnostic for FILTER_NOT_FOUND
        """
        msg = f"Undefined filter '{filter_name}'"
        return Diagnostic(
            code=DiagnosticCode.FILTER_NOT_FOUND,
            message=msg,
            hint=f"Register a filter module that defines '{filter_name}'",
            help_url=f"{ErrorTemplate._DOCS_BASE}/introduction/#filters",
            filter_name=filter_name,
        )

    @staticmethod
    def filter_failed(filter_name: str, error_msg: str) -> Diagnostic:
        """Filter rejected its arguments.

        Args:
            filter_name: The filter that failed
            error_msg: Message of the underlying TypeError/ValueError

        Returns:
            Diagnostic for FILTER_FAILED
        """
        msg = f"{filter_name}: {error_msg}"
        return Diagnostic(
            code=DiagnosticCode.FILTER_FAILED,
            message=msg,
            hint="Check the number and types of arguments passed to the filter",
            filter_name=filter_name,
        )

    @staticmethod
    def template_syntax(detail: str) -> Diagnostic:
        """Syntax error found by a host parser.

        Args:
            detail: Description of the malformed markup

        Returns:
            Diagnostic for TEMPLATE_SYNTAX
        """
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_SYNTAX,
            message=detail,
            help_url=f"{ErrorTemplate._DOCS_BASE}/introduction/",
        )
