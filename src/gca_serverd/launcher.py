"""GCA server daemon entry point.

Usage:
    gca-serverd                    # production mode
    gca-serverd --internal-test    # internal test mode (internal APIs, INFO logging)

The server runs in ``~/gca-server``. Optional settings are read from
``~/gca-server/supervisor.yaml``:

    server_factory: gca_backend.server:new_gca_server
    shutdown_eta: 90        # seconds, shown to the operator only
    progress_interval: 5    # seconds between shutdown progress lines
    log_level: INFO
    color: false
"""

import asyncio
import logging
import os
import sys
from typing import Mapping, Sequence

from gca_serverd.config import LaunchConfiguration, load_settings
from gca_serverd.errors import StartupError
from gca_serverd.registry import resolve_server_factory
from gca_serverd.supervisor import Supervisor


EXIT_STARTUP_FAILURE = 1


async def amain(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None
) -> int:
    """Resolve configuration, start the server and supervise it until shutdown.

    Returns:
        Process exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        launch_config = LaunchConfiguration.from_environment(argv, environ)
        settings = load_settings(launch_config.settings_file)

        Supervisor.setup_logging(
            level=settings.effective_log_level(launch_config.internal_test_mode),
            use_color=settings.color
        )
        logger = logging.getLogger("launch")
        logger.info(f"Server directory: {launch_config.server_dir}")
        if settings.source is not None:
            logger.info(f"Using settings file: {settings.source}")

        factory = resolve_server_factory(settings.server_factory)
        supervisor = Supervisor(launch_config, factory, settings)
        return await supervisor.run()

    except StartupError as e:
        print(e.describe(), flush=True)
        return EXIT_STARTUP_FAILURE


def main():
    """Entry point for the GCA server daemon."""
    code = asyncio.run(amain())
    sys.stdout.flush()
    sys.stderr.flush()
    logging.shutdown()
    # Exit even if the server left non-daemon threads behind
    os._exit(code)


if __name__ == "__main__":
    main()
