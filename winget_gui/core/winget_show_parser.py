from typing import Final, Mapping

from .winget_types import PackageDetail

# Lower-cased localized keys of `winget show` mapped to canonical fields.
_DETAIL_KEYS: Final[Mapping[str, str]] = {
    # version
    "version": "version",
    "packageversion": "version",
    "versión": "version",
    "versão": "version",
    "versione": "version",
    "versie": "version",
    # publisher
    "publisher": "publisher",
    "herausgeber": "publisher",
    "éditeur": "publisher",
    "editor": "publisher",
    "editore": "publisher",
    "uitgever": "publisher",
    # description
    "description": "description",
    "beschreibung": "description",
    "descripción": "description",
    "descrição": "description",
    "descrizione": "description",
    "beschrijving": "description",
    # homepage
    "homepage": "homepage",
    "startseite": "homepage",
    "page d’accueil": "homepage",
    "page d'accueil": "homepage",
    "página principal": "homepage",
    "página inicial": "homepage",
    "home page": "homepage",
    # publisher url
    "publisher url": "publisher_url",
    "herausgeber-url": "publisher_url",
    "url de l’éditeur": "publisher_url",
    "url de l'éditeur": "publisher_url",
    "url del editor": "publisher_url",
    "url do editor": "publisher_url",
    "url editore": "publisher_url",
    "uitgever-url": "publisher_url",
    # license
    "license": "license",
    "lizenz": "license",
    "licence": "license",
    "licencia": "license",
    "licença": "license",
    "licenza": "license",
    "licentie": "license",
    # source
    "source": "source",
    "quelle": "source",
    "origen": "source",
    "fonte": "source",
    "origine": "source",
    "bron": "source",
}

_CONTINUATION_INDENT: Final[str] = "  "


def parse_found_line(line: str) -> tuple[str, str] | None:
    """Parses a "<Found> <name> [<id>]" header line.

    The leading word is localized ("Found", "Gefunden", "Trouvé", ...), so it is
    dropped positionally rather than matched.

    Returns:
        `(name, id)`, or None if the line is not a header line.
    """
    trimmed = line.strip()
    if ":" in trimmed:
        return None

    open_idx = trimmed.rfind("[")
    close_idx = trimmed.rfind("]")
    if open_idx < 0 or close_idx < open_idx:
        return None

    package_id = trimmed[open_idx + 1 : close_idx].strip()
    words = trimmed[:open_idx].split(maxsplit=1)
    name = words[1].strip() if len(words) > 1 else ""
    return name, package_id


def parse_show_output(text: str) -> PackageDetail:
    """Parses `winget show` output into a detail record.

    Args:
        text: Normalized stdout text.

    Returns:
        The parsed detail. Fields missing from the output are left empty.
    """
    fields: dict[str, str] = {}
    publisher_url = ""

    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1

        # Indented lines are nested values of keys we don't track.
        if line.startswith((" ", "\t")):
            continue

        found = parse_found_line(line)
        if found is not None:
            fields["name"], fields["id"] = found
            continue

        if ":" not in line:
            continue

        key, value = line.split(":", 1)
        canonical = _DETAIL_KEYS.get(key.strip().lower())
        if canonical is None:
            continue
        value = value.strip()

        if canonical == "description":
            parts = [value] if value else []
            while i < len(lines) and lines[i].startswith(_CONTINUATION_INDENT):
                continuation = lines[i].strip()
                if continuation:
                    parts.append(continuation)
                i += 1
            value = " ".join(parts)
        elif canonical == "publisher_url":
            publisher_url = value
            continue

        fields[canonical] = value

    if not fields.get("homepage") and publisher_url:
        fields["homepage"] = publisher_url

    return PackageDetail(**fields)
