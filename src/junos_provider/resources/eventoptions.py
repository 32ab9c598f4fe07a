"""event-options destinations."""
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..engine.errors import LineParseError, RenderError
from ..engine.lines import first_field, parse_int, relative_lines, take_named, unquote
from ..engine.resource import ResourceType, attr_blocks, attr_int, attr_str
from ..engine.validator import validate_int_range, validate_no_space
from ..utils.secret import SecretDecodeError, decode_secret

# transfer-delay not configured
TRANSFER_DELAY_UNSET = -1


@dataclass
class ArchiveSite:
    url: str = ""
    password: str = ""


@dataclass
class DestinationOptions:
    name: str = ""
    archive_site: list[ArchiveSite] = field(default_factory=list)
    transfer_delay: int = TRANSFER_DELAY_UNSET


class Destination(ResourceType[DestinationOptions]):
    """Archive destination for event-options uploads.

    The device stores archive site passwords ``$9$``-encoded; they are
    decoded on read so state holds the clear text the user declared.
    """
    type_name = "junos_eventoptions_destination"
    config_path = "event-options destinations"
    quote_name = True
    attributes = ("name", "archive_site", "transfer_delay")
    required = ("name", "archive_site", "archive_site.*.url")

    def decode(self, attributes: Mapping[str, Any]) -> DestinationOptions:
        return DestinationOptions(
            name=attr_str(attributes, "name"),
            archive_site=[
                ArchiveSite(url=attr_str(block, "url"), password=attr_str(block, "password"))
                for block in attr_blocks(attributes, "archive_site")
            ],
            transfer_delay=attr_int(attributes, "transfer_delay", TRANSFER_DELAY_UNSET),
        )

    def validate(self, options: DestinationOptions) -> list[str]:
        errors = []
        if not options.archive_site:
            errors.append("archive_site: at least 1 block is required")
        for index, site in enumerate(options.archive_site):
            errors.extend(validate_no_space(site.url, f"archive_site.{index}.url"))
        if options.transfer_delay != TRANSFER_DELAY_UNSET:
            errors.extend(validate_int_range(options.transfer_delay, "transfer_delay", 0, 4294967295))
        return errors

    def render(self, options: DestinationOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        urls = set()
        for site in options.archive_site:
            if site.url in urls:
                raise RenderError(f"multiple blocks archive_site with the same url {site.url}")
            urls.add(site.url)
            lines.append(f'{set_prefix} archive-sites "{site.url}"')
            if site.password:
                lines.append(f'{set_prefix} archive-sites "{site.url}" password "{site.password}"')
        if options.transfer_delay != TRANSFER_DELAY_UNSET:
            lines.append(f"{set_prefix} transfer-delay {options.transfer_delay}")
        return lines

    def parse(self, output: str, *ids: str) -> DestinationOptions:
        options = DestinationOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item.startswith("archive-sites "):
                url, rest = first_field(item.removeprefix("archive-sites "))
                url = unquote(url)
                site = take_named(options.archive_site, url, lambda s: s.url) or ArchiveSite(url=url)
                if rest.startswith("password "):
                    try:
                        site.password = decode_secret(unquote(rest.removeprefix("password ")))
                    except SecretDecodeError as e:
                        raise LineParseError(f"failed to decode secret: {e}") from e
                options.archive_site.append(site)
            elif item.startswith("transfer-delay "):
                options.transfer_delay = parse_int(item.removeprefix("transfer-delay "))
        return options

    def to_state(self, options: DestinationOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "archive_site": [
                {"url": site.url, "password": site.password} for site in options.archive_site
            ],
            "transfer_delay": options.transfer_delay,
        }
