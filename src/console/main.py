"""Entry point: run the coffee maker simulator as an interactive console or as the HTTP API."""

import argparse
import logging
import sys

from hardware import CoffeeMakerController, HardwareModel

from .menu import run_menu

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Coffee maker hardware simulator.")
    parser.add_argument("--tick-interval", type=float, default=1.0,
                        help="Seconds per brew tick (default: 1.0).")
    parser.add_argument("--brew-ticks", type=int, default=5,
                        help="Consecutive closed-valve ticks needed to finish a brew (default: 5).")
    parser.add_argument("--poll-interval", type=float, default=0.1,
                        help="Controller polling interval in seconds (default: 0.1).")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--serve", action="store_true",
                        help="Serve the HTTP API with uvicorn instead of the console menu.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def serve(args: argparse.Namespace):
    import uvicorn

    from api.main import create_app

    hardware = HardwareModel(tick_interval=args.tick_interval, brew_ticks=args.brew_ticks)
    app = create_app(hardware, poll_interval=args.poll_interval)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.serve:
            serve(args)
            return 0

        with HardwareModel(tick_interval=args.tick_interval, brew_ticks=args.brew_ticks) as hardware:
            hardware.reset()
            controller = CoffeeMakerController(hardware, poll_interval=args.poll_interval)
            controller.switch_on()
            try:
                run_menu(hardware)
            finally:
                controller.switch_off()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
