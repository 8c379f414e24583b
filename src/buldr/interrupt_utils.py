"""Utilities for handling KeyboardInterrupt around external tool runs.

A Ctrl-C while a compiler or linker subprocess is running must still reach
the main thread so the whole build stops.
"""

import _thread


def handle_keyboard_interrupt_properly(ke: KeyboardInterrupt) -> None:
    """Propagate a KeyboardInterrupt to the main thread and re-raise it.

    Usage:
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)

    Raises:
        KeyboardInterrupt: Always
    """
    _thread.interrupt_main()
    raise ke
