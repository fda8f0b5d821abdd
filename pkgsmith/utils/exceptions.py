from __future__ import annotations

from typing import Any, Dict, Optional


class PkgsmithError(Exception):
    """Base exception for all pkgsmith errors."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        """
        Initialize exception.

        Args:
            message: Error message
            **kwargs: Additional error information
        """
        self.message = message
        details: Dict[str, Any] = dict(kwargs.pop("details", None) or {})
        details.update({k: v for k, v in kwargs.items() if v is not None})
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.message}"


class ConfigurationError(PkgsmithError):
    """Exception raised for configuration-related errors."""

    def __init__(
            self, message: str, *, config_key: Optional[str] = None, **kwargs: Any
    ) -> None:
        """Initialize a ConfigurationError.

        Args:
            message: A descriptive error message.
            config_key: The configuration key that caused the error.
            **kwargs: Additional error information.
        """
        super().__init__(message, config_key=config_key, **kwargs)
        self.config_key = config_key


class MissingResourceError(PkgsmithError):
    """Exception raised when a required installer resource is absent."""

    def __init__(self, resource: str, search_path: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize a MissingResourceError.

        Args:
            resource: File name of the missing resource.
            search_path: Directory the resource was expected in.
            **kwargs: Additional error information.
        """
        message = f"Missing required resource: {resource}"
        if search_path:
            message = f"{message} (looked in {search_path})"
        super().__init__(message, resource=resource, search_path=search_path, **kwargs)
        self.resource = resource
        self.search_path = search_path


class SubprocessFailureError(PkgsmithError):
    """Exception raised when an external packaging tool fails."""

    def __init__(
            self, tool: str, returncode: Optional[int], output: str = "", **kwargs: Any
    ) -> None:
        """Initialize a SubprocessFailureError.

        Args:
            tool: Name of the external tool.
            returncode: Exit status, or None if the tool could not be started.
            output: Captured output of the tool.
            **kwargs: Additional error information.
        """
        if returncode is None:
            message = f"{tool} could not be executed"
        else:
            message = f"{tool} failed with exit status {returncode}"
        super().__init__(message, tool=tool, returncode=returncode, **kwargs)
        self.tool = tool
        self.returncode = returncode
        self.output = output


class FilesystemError(PkgsmithError):
    """Exception raised when a purge, copy or write operation fails."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize a FilesystemError.

        Args:
            message: A descriptive error message.
            path: The path that caused the error.
            **kwargs: Additional error information.
        """
        super().__init__(message, path=path, **kwargs)
        self.path = path

    def __str__(self) -> str:
        """String representation."""
        if self.path:
            return f"{self.message} (Path: {self.path})"
        return super().__str__()


class TemplateRenderError(PkgsmithError):
    """Exception raised when a resource template cannot be rendered."""

    def __init__(self, template: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to render template {template}: {reason}",
            template=template,
            reason=reason,
            **kwargs,
        )
        self.template = template
        self.reason = reason


class PipelineStateError(PkgsmithError):
    """Exception raised for an illegal packager state transition."""

    def __init__(
            self, message: str, *, current: Optional[str] = None,
            requested: Optional[str] = None, **kwargs: Any
    ) -> None:
        super().__init__(message, current=current, requested=requested, **kwargs)
        self.current = current
        self.requested = requested
