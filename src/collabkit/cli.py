from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from collabkit.api import build_client
from collabkit.config import load_config, resolve_log_level, resolve_logs_dir
from collabkit.contract import ContractEditor, FieldRegistry, Role, build_payload, collect_fields
from collabkit.notify import RecordingNotifier
from collabkit.session import SessionContext, build_session
from collabkit.utils import load_dotenv_files, setup_logging

_ROLE_CHOICES = [role.value for role in Role]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="collabkit", description="Brand/influencer contract tooling")
    subparsers = parser.add_subparsers(dest="command", required=True)

    save_parser = subparsers.add_parser("save", help="Save edited contract fields")
    _add_contract_args(save_parser)
    _add_fields_args(save_parser)

    sign_parser = subparsers.add_parser("sign", help="Sign a contract")
    _add_contract_args(sign_parser)
    _add_fields_args(sign_parser)

    pdf_parser = subparsers.add_parser("pdf", help="Download the contract PDF")
    pdf_parser.add_argument("config", help="Path to config.yaml")
    pdf_parser.add_argument("--contract-id", required=True, help="Contract identifier.")
    pdf_parser.add_argument("--dest", default=".", help="Directory receiving Contract-<id>.pdf.")

    payload_parser = subparsers.add_parser("payload", help="Print the planned save calls without sending them")
    payload_parser.add_argument("--contract-id", required=True, help="Contract identifier.")
    payload_parser.add_argument("--role", required=True, choices=_ROLE_CHOICES, help="Acting role.")
    payload_parser.add_argument("--brand-id", default="", help="Brand id (required for role=brand).")
    _add_fields_args(payload_parser)

    return parser


def _add_contract_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("config", help="Path to config.yaml")
    parser.add_argument("--contract-id", required=True, help="Contract identifier.")
    parser.add_argument("--role", required=True, choices=_ROLE_CHOICES, help="Acting role.")


def _add_fields_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--fields", default="", help="YAML/JSON mapping of dotted field keys to values.")
    group.add_argument("--html", default="", help="Editable preview HTML carrying data-key fields.")


def read_fields(fields_path: str = "", html_path: str = "") -> Dict[str, str]:
    if html_path:
        return collect_fields(Path(html_path).read_text(encoding="utf-8"))
    loaded = yaml.safe_load(Path(fields_path).read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("Fields file must contain a mapping of dotted keys to values.")
    return {str(key): "" if value is None else str(value) for key, value in loaded.items()}


def _prepare(config_path: str) -> Tuple[Dict[str, Any], SessionContext]:
    config_file = Path(config_path).expanduser().resolve()
    project_root = config_file.parent
    load_dotenv_files(project_root)
    cfg, _, project_root = load_config(config_file)
    setup_logging(resolve_logs_dir(cfg, project_root), resolve_log_level(cfg))
    return cfg, build_session(cfg)


def _editor(args: argparse.Namespace, notifier: RecordingNotifier) -> ContractEditor:
    cfg, session = _prepare(args.config)
    client = build_client(cfg, on_unauthorized=session.clear_token)
    return ContractEditor(
        client=client,
        contract_id=args.contract_id,
        role=getattr(args, "role", Role.INFLUENCER.value),
        session=session,
        notifier=notifier,
    )


def run_save(args: argparse.Namespace) -> None:
    notifier = RecordingNotifier()
    editor = _editor(args, notifier)
    editor.fields.update(read_fields(args.fields, args.html))
    result = asyncio.run(editor.save())
    if not result.ok:
        raise RuntimeError(result.error)


def run_sign(args: argparse.Namespace) -> None:
    notifier = RecordingNotifier()
    editor = _editor(args, notifier)
    editor.fields.update(read_fields(args.fields, args.html))
    if not asyncio.run(editor.sign()):
        raise RuntimeError(_last_error(notifier) or "Failed to sign")


def run_pdf(args: argparse.Namespace) -> Optional[Path]:
    notifier = RecordingNotifier()
    editor = _editor(args, notifier)
    target = asyncio.run(editor.export_pdf(Path(args.dest)))
    if target is None:
        raise RuntimeError(_last_error(notifier) or "Failed to generate PDF")
    print(target)
    return target


def run_payload(args: argparse.Namespace) -> Dict[str, Any]:
    registry = FieldRegistry(read_fields(args.fields, args.html))
    payload = build_payload(registry.snapshot(), args.role, args.contract_id, brand_id=args.brand_id)
    planned: Dict[str, Any] = {
        "mainCall": {"path": payload.main_call.path, "body": payload.main_call.body},
    }
    if payload.notes_call is not None:
        planned["notesCall"] = {"path": payload.notes_call.path, "body": payload.notes_call.body}
    print(json.dumps(planned, ensure_ascii=False, indent=2))
    return planned


def _last_error(notifier: RecordingNotifier) -> str:
    errors = notifier.by_icon("error")
    return (errors[-1].text or errors[-1].title) if errors else ""


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    commands = {
        "save": run_save,
        "sign": run_sign,
        "pdf": run_pdf,
        "payload": run_payload,
    }
    command = commands.get(args.command)
    if command is None:
        parser.error(f"Unknown command: {args.command}")
        return
    try:
        command(args)
    except Exception as err:
        raise SystemExit(f"collabkit {args.command} failed: {err}") from None
