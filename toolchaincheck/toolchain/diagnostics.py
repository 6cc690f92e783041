"""
Render verdicts as user-facing diagnostics.
"""

from typing import Optional

from toolchaincheck.core.versions import Version
from toolchaincheck.toolchain.resolver import (
    Compatible,
    FailureReason,
    IncompatibleFound,
    NotFound,
    Verdict,
)

DEFAULT_INSTALL_URL = "https://cran.r-project.org/bin/windows/Rtools/"


class DiagnosticRenderer:
    """
    Formats failing verdicts into messages telling the user what to install.

    Example:
        >>> renderer = DiagnosticRenderer("Rtools", "R")
        >>> print(renderer.render(NotFound(recommended=Version("4.0"))))
        Rtools is required to build R packages, but is not currently installed.
        <BLANKLINE>
        Please download and install Rtools 4.0 from https://cran.r-project.org/bin/windows/Rtools/.
    """

    def __init__(
        self,
        product: str = "Rtools",
        host_name: str = "R",
        install_url: str = DEFAULT_INSTALL_URL,
    ):
        self.product = product
        self.host_name = host_name
        self.install_url = install_url

    def needed(self, recommended: Optional[Version]) -> str:
        if recommended is None:
            return f"the appropriate version of {self.product}"
        return f"{self.product} {recommended}"

    def _install_hint(self, verdict: Verdict) -> str:
        return (
            f"Please download and install {self.needed(verdict.recommended)} "
            f"from {self.install_url}."
        )

    def _required(self) -> str:
        return f"{self.product} is required to build {self.host_name} packages, but"

    def render(self, verdict: Verdict) -> Optional[str]:
        """
        Message for a verdict.

        Returns:
            The diagnostic text, or None for compatible and not-applicable
            verdicts
        """
        if isinstance(verdict, Compatible):
            return None

        if isinstance(verdict, NotFound):
            if verdict.reason == FailureReason.NOT_APPLICABLE:
                return None
            if verdict.reason == FailureReason.HOST_VERSION_UNKNOWN:
                return (
                    f"Cannot tell which version of {self.product} is needed: "
                    f"the {self.host_name} version is unknown.\n\n{verdict.detail}"
                )
            return (
                f"{self._required()} is not currently installed.\n\n"
                f"{self._install_hint(verdict)}"
            )

        if isinstance(verdict, IncompatibleFound):
            return self._render_incompatible(verdict)

        raise TypeError(f"Unknown verdict type: {type(verdict).__name__}")

    def _render_incompatible(self, verdict: IncompatibleFound) -> str:
        host = verdict.host_version
        candidate = verdict.candidate

        if verdict.reason == FailureReason.WRONG_VERSION_ON_PATH:
            return (
                f"{self.product} {candidate.version} found on the path at "
                f"{candidate.path} is not compatible with {self.host_name} {host}.\n\n"
                f"Please download and install {self.needed(verdict.recommended)} "
                f"from {self.install_url}, remove the incompatible version from your PATH."
            )

        if verdict.reason == FailureReason.NO_COMPATIBLE_REGISTERED:
            versions = ",".join(str(c.version) for c in verdict.candidates)
            return (
                f"{self._required()} no version of {self.product} compatible with "
                f"{self.host_name} {host} was found. (Only the following incompatible "
                f"version(s) of {self.product} were found: {versions})\n\n"
                f"{self._install_hint(verdict)}"
            )

        if verdict.reason == FailureReason.INSTALLATION_DELETED:
            return (
                f"{self._required()} the version of {self.product} previously "
                f"installed in {candidate.path} has been deleted.\n\n"
                f"{self._install_hint(verdict)}"
            )

        if verdict.reason == FailureReason.VERSION_DRIFT:
            return (
                f"{self._required()} no version of {self.product} compatible with "
                f"{self.host_name} {host} was found. {self.product} {candidate.version} "
                f"was previously installed in {candidate.path} but now that directory "
                f"contains {self.product} {verdict.actual_version}.\n\n"
                f"{self._install_hint(verdict)}"
            )

        raise ValueError(f"Unexpected failure reason: {verdict.reason}")


__all__ = ["DiagnosticRenderer", "DEFAULT_INSTALL_URL"]
