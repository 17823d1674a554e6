"""
Data serialization and launcher generation.
"""
from jsreport.export.data_export import (
    data_path_base,
    data_source_attribution_html,
    dataset_to_html,
    picture_attribution_html,
    prepare_dataframe,
    save_dataframe,
)
from jsreport.export.launchers import (
    generate_bat_launcher,
    generate_readme_content,
    generate_sh_launcher,
    write_launchers,
)

__all__ = [
    "data_path_base",
    "data_source_attribution_html",
    "dataset_to_html",
    "picture_attribution_html",
    "prepare_dataframe",
    "save_dataframe",
    "generate_bat_launcher",
    "generate_readme_content",
    "generate_sh_launcher",
    "write_launchers",
]
