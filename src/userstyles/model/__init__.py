from userstyles.model.diagnostic import Diagnostic, Severity

__all__ = ["Diagnostic", "Severity"]
