import logging
import threading

from paperpress.config import settings, Settings, PRINTER_WIDTH
from paperpress.drivers import printer_console
from paperpress.drivers import printer_usb

logger = logging.getLogger(__name__)


def create_printer(config: Settings = settings):
    """
    Opens the receipt printer, or falls back to the console driver.

    A printer that fails to open or initialize counts as "no printer",
    never as a startup failure.
    """
    try:
        return printer_usb.open_printer(
            vendor_id=config.printer_vendor_id,
            product_id=config.printer_product_id,
            timeout=config.printer_timeout,
            serial_port=config.printer_serial_port,
            baudrate=config.printer_baudrate,
            width=PRINTER_WIDTH,
        )
    except Exception as e:
        logger.warning(f"No printer available ({e!r}); printing to stdout")
        return printer_console.PrinterDriver(width=PRINTER_WIDTH)


# Global Hardware Instance
printer = create_printer()

# Held from the first chunk of a document through its cut, so concurrent
# requests never interleave on paper.
printer_lock = threading.Lock()
