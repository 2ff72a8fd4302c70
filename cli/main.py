from __future__ import annotations

import argparse
import asyncio
import base64
import mimetypes
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from domain.models import (
    AppConfig,
    ContactDetails,
    JobStatus,
    JobStatusKind,
    JobTiming,
    PhotoAttachments,
    QuoteRequest,
)
from domain.ports import BrowserLauncherPort, LoggerPort, UserInteractionPort
from domain.services import FormStageDriver, QuoteSessionController, SessionStore, validate_quote_request
from infra.browser import PlaywrightLauncher
from infra.config import FileSystemConfigProvider
from infra.interaction import ConsoleUserInteraction
from infra.persistence import SQLiteJobStatusRepository
from infra.runtime import StructuredLogger, SystemClock, UuidIdGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quote-poster")
    parser.add_argument("--config-dir", default="./config", help="Path to config folder")
    parser.add_argument("--log-level", default="info", choices=["info", "warning", "error"])
    sub = parser.add_subparsers(dest="command", required=True)

    serve_p = sub.add_parser("serve", help="Start the HTTP API")
    serve_p.add_argument("--host", default=None)
    serve_p.add_argument("--port", type=int, default=None)
    _add_headless_flags(serve_p)

    post_p = sub.add_parser("post-job", help="Post one quote request from the terminal")
    post_p.add_argument("--category", required=True)
    post_p.add_argument("--postcode", required=True)
    post_p.add_argument("--description", required=True)
    post_p.add_argument("--name", required=True)
    post_p.add_argument("--email", required=True)
    post_p.add_argument("--phone", required=True)
    post_p.add_argument("--category-slug", default="")
    post_p.add_argument("--suburb", default=None)
    post_p.add_argument("--property-type", default="house")
    post_p.add_argument("--timing", choices=[t.value for t in JobTiming], default=JobTiming.FLEXIBLE.value)
    post_p.add_argument("--photo", help="Image file attached as the original photo")
    post_p.add_argument("--visualization", help="Image file attached as the visualization")
    _add_headless_flags(post_p)

    sub.add_parser("check-config", help="Validate config.json and print the effective settings")
    return parser


def _add_headless_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--headless", dest="headless", action="store_true", default=None)
    p.add_argument("--no-headless", dest="headless", action="store_false")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    provider = FileSystemConfigProvider(args.config_dir)
    logger = StructuredLogger(min_level=args.log_level)

    errors = provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return 1
    cfg = _apply_overrides(provider.get_config(), args)

    if args.command == "check-config":
        automation = cfg.automation
        print(f"Config OK ({provider.config_path})")
        print(f"Start URL: {automation.start_url}")
        print(f"Headless: {'ON' if automation.headless else 'OFF'}")
        print(f"Navigation timeout: {automation.navigation_timeout_ms} ms")
        print(f"Listening on: {cfg.host}:{cfg.port}")
        return 0

    if args.command == "serve":
        return _handle_serve(cfg, logger)

    if args.command == "post-job":
        try:
            request = build_request(args)
            validate_quote_request(request)
        except (OSError, ValueError) as exc:
            print(f"Invalid job request: {exc}")
            return 1
        return asyncio.run(
            post_job_interactively(
                request,
                launcher=PlaywrightLauncher(),
                config=cfg,
                ui=ConsoleUserInteraction(),
                logger=logger,
                job_id=UuidIdGenerator().new_job_id(),
            )
        )

    raise SystemExit(f"Unsupported command: {args.command}")


def build_controller(
    cfg: AppConfig,
    launcher: BrowserLauncherPort,
    logger: LoggerPort,
) -> QuoteSessionController:
    return QuoteSessionController(
        launcher=launcher,
        store=SessionStore(),
        driver=FormStageDriver(config=cfg.automation, logger=logger),
        config=cfg.automation,
        logger=logger,
    )


def build_request(args: argparse.Namespace) -> QuoteRequest:
    photos = None
    if args.photo or args.visualization:
        photos = PhotoAttachments(
            original=_file_to_data_uri(args.photo) if args.photo else None,
            visualization=_file_to_data_uri(args.visualization) if args.visualization else None,
        )
    return QuoteRequest(
        category_name=args.category,
        postcode=args.postcode,
        description=args.description,
        contact=ContactDetails(name=args.name, email=args.email, phone=args.phone),
        category_slug=args.category_slug,
        suburb=args.suburb,
        property_type=args.property_type,
        timing=JobTiming(args.timing),
        photos=photos,
    )


async def post_job_interactively(
    request: QuoteRequest,
    *,
    launcher: BrowserLauncherPort,
    config: AppConfig,
    ui: UserInteractionPort,
    logger: LoggerPort,
    job_id: str,
) -> int:
    """Run the form stages, ask for the SMS code on the terminal, then submit it."""
    controller = build_controller(config, launcher, logger)
    updates: list[JobStatus] = []

    def _on_update(status: JobStatus) -> None:
        updates.append(status)
        print(f"[{status.status.value}] {status.message}")

    try:
        await controller.start_session(job_id, request, _on_update)
        last = updates[-1] if updates else None
        if last is None or last.status is not JobStatusKind.AWAITING_OTP:
            reason = last.error if last and last.error else "form stages did not complete"
            await ui.send_info(f"Job posting failed: {reason}")
            return 1

        answer = await ui.ask_free_text("otp", "Enter the verification code sent to your phone")
        final = await controller.submit_otp(job_id, answer.text)
    finally:
        await controller.close_all()

    if final.status is JobStatusKind.COMPLETED:
        ref = final.external_job_url or "reference not found on the confirmation page"
        await ui.send_info(f"{final.message} ({ref})")
        return 0
    await ui.send_info(f"{final.message}: {final.error or '-'}")
    return 1


def _handle_serve(cfg: AppConfig, logger: StructuredLogger) -> int:
    import uvicorn

    from app import QuoteJobFacade
    from app.http_api import create_app

    facade = QuoteJobFacade(
        controller=build_controller(cfg, PlaywrightLauncher(), logger),
        status_repo=SQLiteJobStatusRepository(db_path=cfg.db_path),
        id_generator=UuidIdGenerator(),
        logger=logger,
    )
    app = create_app(facade, clock=SystemClock(), logger=logger, cors_origins=cfg.cors_origins)
    logger.info("server_starting", host=cfg.host, port=cfg.port, headless=cfg.automation.headless)
    uvicorn.run(app, host=cfg.host, port=cfg.port)
    return 0


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    headless = getattr(args, "headless", None)
    if headless is not None:
        cfg = replace(cfg, automation=replace(cfg.automation, headless=headless))
    host = getattr(args, "host", None)
    if host:
        cfg = replace(cfg, host=host)
    port = getattr(args, "port", None)
    if port:
        cfg = replace(cfg, port=port)
    return cfg


def _file_to_data_uri(path: str) -> str:
    mime = mimetypes.guess_type(path)[0] or "image/jpeg"
    encoded = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


if __name__ == "__main__":
    raise SystemExit(main())
