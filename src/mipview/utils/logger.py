"""Global logging and error reporting utilities"""
import logging
import sys
import traceback

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_main_window = None


def configure_logging(verbose: bool = False):
    """Configure root logging for an entry point (console only)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def set_main_window(window):
    """Set the preview window reference for showing popups"""
    global _main_window
    _main_window = window


def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Report an exception, then re-raise it.
    
    Args:
        e: The exception to handle
        user_message: User-friendly message to show (optional)
        title: Title for the popup dialog
    
    In DEBUG_MODE the exception is raised straight away (full traceback).
    Otherwise the traceback is logged, a message box is shown when a preview
    window is registered, and the exception is raised.
    """
    if DEBUG_MODE:
        raise e

    tb = traceback.format_exc()
    print(f"ERROR: {tb}", file=sys.stderr)

    message = user_message if user_message else str(e)
    if _main_window:
        from PyQt5.QtWidgets import QMessageBox
        QMessageBox.critical(_main_window, title, message)
    else:
        print(f"ERROR POPUP (no window): {title} - {message}", file=sys.stderr)

    raise e
