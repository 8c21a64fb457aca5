import logging
from typing import Optional

from escpos.printer import Serial, Usb

from paperpress.config import PRINTER_WIDTH
from paperpress.errors import OutputFinishFailure

logger = logging.getLogger(__name__)


class PrinterDriver:
    """
    Real hardware driver for an ESC/POS receipt printer (Epson TM series).
    Wraps an opened python-escpos printer, over USB or a serial port.

    Chunk writes are best effort: a failed chunk is logged and the document
    carries on so the operator can see how far it got. The closing cut is
    the one operation whose failure ends the request.
    """

    def __init__(self, device, name: str = "usb", width: int = PRINTER_WIDTH):
        self.device = device
        self.name = name
        self.width = width
        self.is_device = True

    @classmethod
    def open_usb(
        cls,
        vendor_id: int,
        product_id: int,
        timeout: float = 2.0,
        width: int = PRINTER_WIDTH,
    ) -> "PrinterDriver":
        """Opens and initializes a USB printer. Raises if it is missing."""
        logger.info(
            f"Attempting to open USB printer "
            f"(vendor=0x{vendor_id:04x}, product=0x{product_id:04x})..."
        )
        # pyusb timeouts are in milliseconds
        device = Usb(vendor_id, product_id, timeout=int(timeout * 1000))
        device.open()
        logger.info("USB driver opened successfully")
        return cls._initialize(device, "usb", width)

    @classmethod
    def open_serial(
        cls,
        port: str,
        baudrate: int = 9600,
        timeout: float = 2.0,
        width: int = PRINTER_WIDTH,
    ) -> "PrinterDriver":
        """Opens and initializes a printer on a serial port. Raises if it fails."""
        logger.info(f"Attempting to open serial printer on {port} @ {baudrate}...")
        device = Serial(devfile=port, baudrate=baudrate, timeout=timeout)
        device.open()
        logger.info("Serial driver opened successfully")
        return cls._initialize(device, "serial", width)

    @classmethod
    def _initialize(cls, device, name: str, width: int) -> "PrinterDriver":
        # ESC @ - Hardware reset (clears all settings and buffer)
        device.hw("INIT")
        logger.info("Printer initialized successfully")
        return cls(device, name=name, width=width)

    def begin(self):
        """The paper cut closes each document; nothing to open it."""
        pass

    def write_chunk(self, text: str):
        try:
            self.device.text(text)
        except Exception as e:
            logger.error(f"Failed to write chunk: {e!r}")

    def finish(self):
        """Cuts the paper. Raises OutputFinishFailure when the cut fails."""
        logger.info("Flushing print buffer...")
        try:
            self.device.cut()
        except Exception as e:
            logger.error(f"Failed to print: {e!r}")
            raise OutputFinishFailure(f"Printer cut failed: {e}") from e
        logger.info("Print successful")

    def close(self):
        """Close the connection."""
        try:
            self.device.close()
        except Exception as e:
            logger.warning(f"Failed to close printer: {e!r}")


def open_printer(
    vendor_id: int,
    product_id: int,
    timeout: float = 2.0,
    serial_port: Optional[str] = None,
    baudrate: int = 9600,
    width: int = PRINTER_WIDTH,
) -> PrinterDriver:
    """Opens the configured printer, serial when a port is given, else USB."""
    if serial_port:
        return PrinterDriver.open_serial(serial_port, baudrate, timeout, width)
    return PrinterDriver.open_usb(vendor_id, product_id, timeout, width)
