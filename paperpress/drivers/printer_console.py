from paperpress.config import PRINTER_WIDTH


class PrinterDriver:
    """
    Console stand-in used when no receipt printer is attached.

    Chunks go straight to stdout. Each document is bracketed by two
    identical rule lines, since there is no paper cut to mark its end.
    """

    name = "console"
    is_device = False

    def __init__(self, width: int = PRINTER_WIDTH):
        self.width = width

    def print_line(self):
        """Prints a separator line."""
        print("-" * self.width, flush=True)

    def begin(self):
        self.print_line()

    def write_chunk(self, text: str):
        print(text, end="", flush=True)

    def finish(self):
        self.print_line()

    def close(self):
        """Nothing to release."""
        pass
