"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use PSEUDOSCSS_ prefix (e.g., PSEUDOSCSS_TRACE_TOKENS=true).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use PSEUDOSCSS_ prefix.

    Examples:
        PSEUDOSCSS_DEFAULT_TAG_NAME=section
        PSEUDOSCSS_TRACE_TOKENS=true
        PSEUDOSCSS_SOURCE_ENCODING=latin-1
    """

    model_config = SettingsConfigDict(
        env_prefix="PSEUDOSCSS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Interpreter configuration
    default_tag_name: str = Field(
        default="div",
        description="Tag rendered for selectors that only carry classes, ids or attributes",
    )

    content_keyword: str = Field(
        default="content",
        description="Reserved word that starts an inline text statement (content: \"...\";)",
    )

    trace_tokens: bool = Field(
        default=False,
        description="Log every token with the frame it is applied to (needs verbosity >= 3)",
    )

    # Resource configuration
    source_encoding: str = Field(
        default="utf-8",
        description="Encoding used to read sources and data files",
    )

    # Output configuration
    doctype: str = Field(
        default="<!DOCTYPE html>",
        description="Declaration written in front of the compiled HTML",
    )

    html_footer_template: str = Field(
        default="\n<!-- Generated from {source} -->\n",
        description="Trailer appended to the compiled HTML",
    )

    css_footer_template: str = Field(
        default="\n/* Generated from {source} */\n",
        description="Trailer appended to the compiled CSS",
    )

    def htmlFooter_make(self, source: str) -> str:
        """
        Build the generation comment appended to the HTML output.

        Args:
            source: Input path as given on the command line

        Returns:
            Footer string (e.g., "\\n<!-- Generated from index.html.scss -->\\n")

        Example:
            >>> settings = AppSettings()
            >>> settings.htmlFooter_make('home.scss')
            '\\n<!-- Generated from home.scss -->\\n'
        """
        return self.html_footer_template.format(source=source)

    def cssFooter_make(self, source: str) -> str:
        """
        Build the generation comment appended to the CSS output.

        Example:
            >>> settings = AppSettings()
            >>> settings.cssFooter_make('home.scss')
            '\\n/* Generated from home.scss */\\n'
        """
        return self.css_footer_template.format(source=source)


# Singleton instance - import this in your code
appsettings = AppSettings()
