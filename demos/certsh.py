'''
Looks up subdomains on crt.sh for each domain given on the command line.
Uses the callback style `Session.send` API and cancels whatever is still
running after `--timeout` seconds with `Session.cancel_requests`.
'''
import argparse
import asyncio
import dataclasses as dc
import logging
import sys
from typing import Any

import httpx

import reqkit


@dc.dataclass(slots=True)
class SubdomainResult:
    domain: str
    subdomains: list[str]

    @property
    def total(self) -> int:
        return len(self.subdomains)


def normalize_hostname(hostname: str) -> str:
    return hostname.strip().lower().rstrip('.')


def walk_certsh_response(data: list[dict], domain: str):
    for entry in data:
        name_value = entry.get('name_value') or entry.get('common_name') or ''
        for line in str(name_value).splitlines():
            hostname = normalize_hostname(line)
            if hostname and hostname != domain:
                yield hostname


@dc.dataclass(frozen=True)
class CertshRequest(reqkit.Request[SubdomainResult]):
    domain: str
    base_url: str = 'https://crt.sh'

    @property
    def parameters(self) -> dict[str, str]:
        return {'q': f'%.{self.domain}', 'output': 'json'}

    def response_from(self, obj: Any, response: httpx.Response) -> SubdomainResult:
        if not isinstance(obj, list):
            raise reqkit.UnexpectedObjectError(obj)
        subdomains = set(walk_certsh_response(obj, self.domain))
        return SubdomainResult(domain=self.domain, subdomains=sorted(subdomains))


def print_result(domain: str, result: reqkit.Result[SubdomainResult]) -> None:
    sep = '-------------------------'
    match result:
        case reqkit.Success(value=found):
            lines = '\n'.join(f'- {name}' for name in found.subdomains)
            print(f'\n{sep}\nDomain: {domain}\n{lines}\nTotal: {found.total}\n{sep}')
        case reqkit.Failure(error=error):
            print(f'\n{sep}\nDomain: {domain}\nFailed: {error!r}\n{sep}')


async def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('domains', nargs='+')
    parser.add_argument('--timeout', type=float, default=30.0)
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    pending = set(args.domains)
    all_done = asyncio.Event()

    def on_result(domain: str):
        def handler(result: reqkit.Result[SubdomainResult]) -> None:
            print_result(domain, result)
            pending.discard(domain)
            if not pending:
                all_done.set()
        return handler

    async with reqkit.create_default_session() as session:
        for domain in args.domains:
            session.send(CertshRequest(domain=domain), handler=on_result(domain))

        try:
            await asyncio.wait_for(all_done.wait(), timeout=args.timeout)
        except asyncio.TimeoutError:
            session.cancel_requests(CertshRequest)
            await all_done.wait()

    return 0


if __name__ == '__main__':
    sys.exit(
        asyncio.run(main())
    )
