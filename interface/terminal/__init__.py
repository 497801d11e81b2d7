"""终端界面"""
from interface.terminal.console import TerminalConsole, TerminalForm, TerminalPresenter

__all__ = ["TerminalConsole", "TerminalForm", "TerminalPresenter"]
