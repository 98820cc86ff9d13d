"""
Wi-Fi Access Point Bootstrap - Main Entry Point
"""

import asyncio
import signal
import sys
import logging
import os

from services.provisioning_service import ProvisioningService
from errors import ProvisioningError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

async def main(service_factory=ProvisioningService):
    """Main entry point"""

    service = None
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()

    def signal_handler(signum):
        logger.info(f"Received signal {signum}, shutting down...")
        main_task.cancel()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, signal_handler, signum)
        except (NotImplementedError, RuntimeError):
            # Not available outside the main thread or on some platforms
            pass

    try:
        # Get config file path from environment variable or use default
        config_path = os.environ.get('CONFIG_FILE', 'config/config.yaml')
        logger.info(f"Using configuration file name from environment: {config_path}")

        service = service_factory(config_path=config_path)
        await service.run()

    except asyncio.CancelledError:
        logger.info("Provisioning cancelled")
        return EXIT_INTERRUPTED
    except ProvisioningError as e:
        logger.error(f"Provisioning failed: {e}")
        return EXIT_FAILURE
    except Exception as e:
        logger.error(f"Provisioning failed: {type(e).__name__}: {e}")
        return EXIT_FAILURE
    finally:
        if service:
            await service.stop()

    return EXIT_OK

def cli():
    """Console script entry point"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nProvisioning stopped by user")
        sys.exit(EXIT_INTERRUPTED)

if __name__ == "__main__":
    cli()
