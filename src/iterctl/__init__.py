"""iterctl: keeps Azure DevOps iteration calendars populated."""

__version__ = "0.1.0"
