def get_markdown_config():
    """
    Configuration for the default Python-Markdown renderer.

    Fenced code is shielded before the renderer runs, so the ``fenced_code``
    extension is not needed. Raw HTML blocks are shielded too; the renderer
    only ever sees prose, lists, tables and placeholder tokens.
    """
    return {
        "extensions": [
            "tables",
            "sane_lists",
            "footnotes",
            "def_list",
            "abbr",
        ],
        "extension_configs": {},
        "output_format": "html",
    }
