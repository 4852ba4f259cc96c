"""Factory for the submission sink configured in settings."""

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.adapters.sink.google_sheets import GoogleSheetsSink
from ideas_api.core.config import SheetsSettings, settings


def create_submission_sink(sheets_settings: SheetsSettings | None = None) -> AbstractSubmissionSink:
    """Instantiate the Google Sheets sink from configuration.

    Missing credentials are not an error here; the sink reports them when an
    append is attempted so the service can still start and serve /health.

    Args:
        sheets_settings: Optional settings; defaults to ``settings.sheets``.

    Returns:
        AbstractSubmissionSink: Configured sink instance.
    """
    cfg = sheets_settings or settings.sheets

    return GoogleSheetsSink(
        service_account_email=cfg.service_account_email,
        private_key=cfg.private_key,
        sheet_id=cfg.sheet_id,
        sheet_range=cfg.sheet_range,
        value_input_option=cfg.value_input_option,
        token_uri=cfg.token_uri,
        api_base_url=cfg.api_base_url,
        timeout_seconds=cfg.timeout_seconds,
    )
