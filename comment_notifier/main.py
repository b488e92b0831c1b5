"""Main entry point for the comment notifier."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

from comment_notifier.config.environment import EnvironmentConfig
from comment_notifier.config.exceptions import ConfigurationError
from comment_notifier.config.loader import load_config
from comment_notifier.config.models import AppConfig
from comment_notifier.listeners import CommentDispatcher, build_listeners
from comment_notifier.logging import get_logger
from comment_notifier.logging.config import configure_logging
from comment_notifier.notifications.composer import NotificationComposer
from comment_notifier.notifications.mail_listeners import DatabaseMailListener, LoggingMailListener
from comment_notifier.notifications.sender import MailSender
from comment_notifier.notifications.session import create_session
from comment_notifier.observation import ObservationManager, load_event_script, replay_events
from comment_notifier.persistence.database import close_database, init_database
from comment_notifier.store import load_wiki_fixture
from comment_notifier.store.exceptions import StoreError

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Comment notifier - emails document authors about new and updated comments"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--wiki",
        type=Path,
        required=True,
        help="YAML fixture with users, documents and comments",
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="YAML script of document change events to replay",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv=None) -> int:
    """
    Main entry point for the comment notifier.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    database_ready = False

    try:
        # Step 1: Load configuration (before logging for format detection)
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        # Step 2: Configure logging
        log_format = app_config.logging.format if app_config.logging else "key-value"
        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(level=env_config.log_level, format_type=log_format, environment=environment)

        logger.info(
            "Comment notifier starting",
            extra={
                "event": "service.starting",
                "wiki_fixture": str(args.wiki),
                "event_script": str(args.events),
                "log_level": env_config.log_level,
            },
        )

        # Step 3: Delivery tracking
        if app_config.delivery_log.enabled:
            init_database(env_config.database_url)
            database_ready = True
            mail_listener = DatabaseMailListener()
        else:
            mail_listener = LoggingMailListener()

        # Step 4: Wiki content and events
        store = load_wiki_fixture(args.wiki)
        script = load_event_script(args.events)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "document_count": len(store),
                "scripted_event_count": len(script.events),
                "delivery_log": app_config.delivery_log.enabled,
                "log_format": log_format,
            },
        )

        # Step 5: Wire the pipeline
        mail_sender = MailSender(
            max_workers=app_config.mail.max_workers,
            sender_name=app_config.mail.sender_name,
        )
        mail_properties = env_config.mail_properties()
        dispatcher = CommentDispatcher(
            store=store,
            composer=NotificationComposer(wiki_name=app_config.wiki_name),
            mail_sender=mail_sender,
            session_factory=lambda: create_session(mail_properties, use_tls=app_config.mail.use_tls),
            mail_listener=mail_listener,
        )

        manager = ObservationManager()
        for listener in build_listeners(dispatcher):
            manager.add_listener(listener)

        # Step 6: Replay and drain
        try:
            raised = replay_events(script, store, manager)
        finally:
            mail_sender.shutdown(wait=True, timeout=app_config.mail.shutdown_timeout)

        uptime_seconds = time.time() - start_time
        logger.info(
            f"Comment notifier stopped after {raised} event(s)",
            extra={
                "event": "service.stopping",
                "events_raised": raised,
                "uptime_seconds": round(uptime_seconds, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except StoreError as e:
        print(f"Input Error: {e}", file=sys.stderr)
        logger.error(
            f"Input error: {e}",
            extra={"event": "input.error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1
    finally:
        if database_ready:
            close_database()


if __name__ == "__main__":
    sys.exit(main())
