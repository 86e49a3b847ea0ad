from winget_gui.core.winget_show_parser import parse_found_line, parse_show_output
from winget_gui.core.winget_types import PackageDetail


def test_parse_show_output_reads_english_block() -> None:
    text = (
        "Found Google Chrome [Google.Chrome]\n"
        "Version: 131.0.6778.86\n"
        "Publisher: Google LLC\n"
        "Publisher Url: https://www.google.com/\n"
        "Author: Google LLC\n"
        "Moniker: chrome\n"
        "Description:\n"
        "  Fast, secure browser.\n"
        "  Built by Google.\n"
        "Homepage: https://www.google.com/chrome\n"
        "License: Freeware\n"
        "Installer:\n"
        "  Installer Type: msi\n"
        "  Installer Url: https://dl.google.com/chrome.msi\n"
    )

    assert parse_show_output(text) == PackageDetail(
        id="Google.Chrome",
        name="Google Chrome",
        version="131.0.6778.86",
        publisher="Google LLC",
        description="Fast, secure browser. Built by Google.",
        homepage="https://www.google.com/chrome",
        license="Freeware",
    )


def test_reads_german_found_line_and_keys() -> None:
    text = (
        "Gefunden Chrome [Google.Chrome]\n"
        "Herausgeber: Google LLC\n"
        "Lizenz: Freeware\n"
        "Beschreibung: Schneller Browser.\n"
    )

    detail = parse_show_output(text)

    assert detail.name == "Chrome"
    assert detail.id == "Google.Chrome"
    assert detail.publisher == "Google LLC"
    assert detail.license == "Freeware"
    assert detail.description == "Schneller Browser."


def test_publisher_url_is_only_a_homepage_fallback() -> None:
    text = (
        "Found Tool [Vendor.Tool]\n"
        "Publisher Url: https://vendor.example\n"
    )

    assert parse_show_output(text).homepage == "https://vendor.example"


def test_publisher_url_does_not_override_later_homepage() -> None:
    text = (
        "Publisher Url: https://vendor.example\n"
        "Homepage: https://tool.example\n"
    )

    assert parse_show_output(text).homepage == "https://tool.example"


def test_description_inline_value_joins_continuation_lines() -> None:
    text = (
        "Description: First line\n"
        "  second line\n"
        "    third line\n"
        "License: MIT\n"
    )

    detail = parse_show_output(text)

    assert detail.description == "First line second line third line"
    assert detail.license == "MIT"


def test_unknown_and_indented_keys_are_ignored() -> None:
    text = (
        "Found Tool [Vendor.Tool]\n"
        "Tags:\n"
        "  version: not-this-one\n"
        "Release Notes Url: https://example.com\n"
        "Version: 1.0\n"
    )

    detail = parse_show_output(text)

    assert detail.version == "1.0"
    assert detail.homepage == ""


def test_source_key_is_parsed() -> None:
    assert parse_show_output("Quelle: winget\n").source == "winget"


def test_parse_found_line() -> None:
    assert parse_found_line("Found Visual Studio Code [Microsoft.VisualStudioCode]") == (
        "Visual Studio Code",
        "Microsoft.VisualStudioCode",
    )
    assert parse_found_line("Trouvé 7-Zip [7zip.7zip]") == ("7-Zip", "7zip.7zip")
    assert parse_found_line("Homepage: https://x.example [docs]") is None
    assert parse_found_line("No brackets here") is None


def test_parse_show_output_of_empty_text_is_empty_detail() -> None:
    assert parse_show_output("") == PackageDetail()
