"""Console module: interactive operator menu for the coffee maker simulator."""

from .menu import ACTIONS, MENU_PROMPT, run_menu

__all__ = ['ACTIONS', 'MENU_PROMPT', 'run_menu']
