import argparse
import binascii
import sys

from blockers import blocker_from_settings
from codec import b64decode_unpadded, b64encode_unpadded, to_human_readable
from config import settings
from database import SessionLocal, get_or_create_generator, init_db, load_generator, save_generator
from errors import LicenseError
from generator import AdminGenerator
from license_client import LicenseVerifier
from logging_config import get_logger, setup_logging
from models import LicenseCheckInfo

logger = get_logger(__name__)

def _b64_arg(value: str) -> bytes:
    try:
        return b64decode_unpadded(value.strip().rstrip("="))
    except (binascii.Error, ValueError):
        raise argparse.ArgumentTypeError(f"{value!r} is not base64")

def cmd_init(args) -> int:
    with SessionLocal() as db:
        if args.rotate:
            generator = AdminGenerator.new_with_random_ivs(settings.parameters())
            epoch = save_generator(db, args.product, generator)
            print(f"Created IV set epoch {epoch} for {args.product}")
        else:
            get_or_create_generator(db, args.product, settings.parameters())
            print(f"IV set ready for {args.product}")
    return 0

def _load(db, args) -> AdminGenerator:
    generator = load_generator(db, args.product, args.epoch)
    if generator is None:
        raise SystemExit(f"No IV set stored for {args.product!r}; run 'init' first")
    return generator

def cmd_issue(args) -> int:
    with SessionLocal() as db:
        generator = _load(db, args)
    try:
        license = generator.generate_license(args.seed)
    except LicenseError as e:
        print(f"Cannot issue license: {e}", file=sys.stderr)
        return 2

    logger.info("License issued", extra={"product": args.product, "seed": b64encode_unpadded(args.seed)})
    print(to_human_readable(license))
    return 0

def cmd_export_iv(args) -> int:
    with SessionLocal() as db:
        generator = _load(db, args)
    try:
        info = generator.check_info(args.index)
    except IndexError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(b64encode_unpadded(info.known_iv))
    return 0

def cmd_verify(args) -> int:
    try:
        parameters = settings.parameters()
        blocker = blocker_from_settings(settings)
    except (binascii.Error, ValueError) as e:
        print(f"Invalid license configuration: {e}", file=sys.stderr)
        return 2

    verifier = LicenseVerifier(
        parameters,
        LicenseCheckInfo(known_iv=args.iv, iv_index=args.index),
        blocker
    )
    verification = verifier.verify_key(args.key)

    if verification.block_reason:
        print(f"{verification.result.value}: {verification.block_reason.value}")
    elif verification.message:
        print(f"{verification.result.value}: {verification.message}")
    else:
        print(verification.result.value)
    return 0 if verification.valid else 1

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline license key generator and checker")
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.APP_VERSION}")
    parser.add_argument("--product", default=settings.PRODUCT_NAME)
    parser.add_argument("--epoch", type=int, default=None, help="IV set epoch (default: latest)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="create the product's IV set")
    p.add_argument("--rotate", action="store_true", help="store a new epoch even if one exists")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("issue", help="issue a license for a base64 seed")
    p.add_argument("seed", type=_b64_arg)
    p.set_defaults(func=cmd_issue)

    p = sub.add_parser("export-iv", help="print one IV for a client build")
    p.add_argument("index", type=int)
    p.set_defaults(func=cmd_export_iv)

    p = sub.add_parser("verify", help="check a human readable license key")
    p.add_argument("key")
    p.add_argument("--iv", type=_b64_arg, required=True)
    p.add_argument("--index", type=int, required=True)
    p.set_defaults(func=cmd_verify)

    return parser

def main(argv=None) -> int:
    setup_logging(settings.LOG_LEVEL)
    args = build_parser().parse_args(argv)
    if args.command in ("init", "issue", "export-iv"):
        init_db()
    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
