"""Operator menu loop: reads numbered actions and dispatches them to the hardware's user actions."""

import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)

MENU_PROMPT = ("\nAction [1: Fill_Water 2: Place_Pot 3: Remove_Pot "
               "4: Press_BrewButton 5: Show_Status 6: Exit] : ")

EXIT_ACTION = 6

# Menu number -> user action method name
ACTIONS: Dict[int, str] = {
    1: 'fill_water',
    2: 'put_pot',
    3: 'remove_pot',
    4: 'press_brew_button',
    5: 'show_state',
}


def run_menu(actions, read: Callable[[str], str] = input,
             write: Callable[[str], None] = print) -> int:
    """Run the menu until Exit or end of input. Returns the number of actions dispatched."""
    dispatched = 0
    while True:
        try:
            line = read(MENU_PROMPT)
        except EOFError:
            logger.info("End of input - leaving menu")
            break

        try:
            choice = int(line.strip())
        except ValueError:
            choice = None

        if choice == EXIT_ACTION:
            break

        name = ACTIONS.get(choice)
        if name is None:
            write("Unknown action")
            continue

        logger.debug(f"Menu action {choice}: {name}")
        if name == 'show_state':
            actions.show_state(write)
        else:
            getattr(actions, name)()
        dispatched += 1

    return dispatched
