import argparse
import json
import logging
import sys
from pathlib import Path

from config import configure_logging, get_config
from creditparser import parse_credit_report

#Sample credit report
xmlpath = Path(__file__).parent.parent / "data" / "sample_report.xml"

def parse_file(xmlpath) -> int:
    xmlbytes = Path(xmlpath).read_bytes()
    result = parse_credit_report(xmlbytes, Path(xmlpath).name)
    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    print(payload)
    return 0 if result.success else 1

def serve() -> int:
    import uvicorn
    cfg = get_config()
    uvicorn.run("api:app", host=cfg.api.host, port=cfg.api.port, reload=cfg.api.debug)
    return 0

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Credit report XML ingestion")
    sub = parser.add_subparsers(dest="command")
    parse_cmd = sub.add_parser("parse", help="extract a credit report from an XML file and print it as JSON")
    parse_cmd.add_argument("path", nargs="?", default=str(xmlpath))
    sub.add_parser("serve", help="run the REST API")
    args = parser.parse_args(argv)

    configure_logging()
    if args.command == "serve":
        return serve()
    path = getattr(args, "path", None) or str(xmlpath)
    if not Path(path).exists():
        logging.error("XML file not found: %s", path)
        return 2
    return parse_file(path)

if __name__ == "__main__":
    sys.exit(main())
