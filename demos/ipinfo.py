import asyncio
import dataclasses as dc
import sys
from typing import Any

import httpx

import reqkit


@dc.dataclass(slots=True)
class IpRecord:
    ip: str
    city: str | None = None
    country: str | None = None
    org: str | None = None
    location: str | None = None
    extras: dict = dc.field(default_factory=dict)

    @property
    def maps_link(self) -> str | None:
        if not self.location:
            return None
        return f"https://maps.google.com/?q={self.location}"


@dc.dataclass(frozen=True)
class IpInfoRequest(reqkit.Request[IpRecord]):
    ip: str
    base_url: str = 'https://ipinfo.io'

    @property
    def path(self) -> str:
        return f'/{self.ip}/json'

    def response_from(self, obj: Any, response: httpx.Response) -> IpRecord:
        if not isinstance(obj, dict):
            raise reqkit.UnexpectedObjectError(obj)
        if obj.get('bogon'):
            raise ValueError(f"{self.ip} is a bogon address")

        known = {f.name for f in dc.fields(IpRecord)}
        record = IpRecord(ip=self.ip)
        for key, value in obj.items():
            if key == 'loc':
                record.location = value
            elif key in known and key != 'extras':
                setattr(record, key, value)
            else:
                record.extras[key] = value
        return record


def record_str(record: IpRecord) -> str:
    sep = '-------------------------'
    result = f'\n{sep}\n'
    for field in dc.fields(record):
        value = getattr(record, field.name, None)
        if isinstance(value, dict):
            result += '\n'.join(f'{k}={v}' for k, v in value.items())
            continue
        result += f'{field.name}: {value or "N/A"}\n'
    result += f'\nMaps link: {record.maps_link}\n{sep}'
    return result


async def main() -> int:
    if len(sys.argv) < 2:
        ip_addr = input('Enter an IP address to lookup: ').strip()
    else:
        ip_addr = sys.argv[1].strip()

    async with reqkit.create_default_session() as session:
        try:
            record = await session.response(IpInfoRequest(ip=ip_addr))
        except reqkit.SessionTaskError as exc:
            print(f'Error fetching IP information: {exc.error!r}')
            return 1

    print(record_str(record))
    return 0


if __name__ == '__main__':
    sys.exit(
        asyncio.run(main())
    )
