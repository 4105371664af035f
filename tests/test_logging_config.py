import json

from loguru import logger

from feedsource.logging_config import REDACTED, get_logger, scrub_text, setup_logging


def test_json_log_file(tmp_path):
    log_file = tmp_path / "logs" / "feedsource.log"
    setup_logging(level="DEBUG", json_format=True, log_file=log_file)
    try:
        get_logger("feedsource.test").info("resolved {source}", source="feed")
    finally:
        logger.remove()

    (line,) = log_file.read_text(encoding="utf-8").splitlines()
    payload = json.loads(line)
    assert payload["level"] == "INFO"
    assert payload["message"] == "resolved feed"
    assert payload["name"] == "feedsource.test"
    assert payload["source"] == "feed"


def test_secret_extras_are_masked(tmp_path):
    log_file = tmp_path / "feedsource.log"
    setup_logging(level="DEBUG", json_format=True, log_file=log_file)
    try:
        logger.bind(accessKeyId="AKIAFEED", connection_string="AccountName=a;AccountKey=a2V5").info(
            "Resolving bucket {bucket}",
            entry={"name": "feed", "secretAccessKey": "topsecret", "sasUrl": "https://a.blob.core.windows.net/c?sig=abc"},
            sasUrl="https://a.blob.core.windows.net/c?sv=1&sig=abc",
            bucket="b",
        )
    finally:
        logger.remove()

    text = log_file.read_text(encoding="utf-8")
    for secret in ("AKIAFEED", "a2V5", "topsecret", "sig=abc"):
        assert secret not in text
    payload = json.loads(text)
    assert payload["accessKeyId"] == REDACTED
    assert payload["connection_string"] == REDACTED
    assert payload["sasUrl"] == REDACTED
    assert payload["entry"]["secretAccessKey"] == REDACTED
    assert payload["entry"]["name"] == "feed"
    assert payload["bucket"] == "b"


def test_text_sink_masks_tokens_in_messages(capsys):
    setup_logging(level="INFO")
    try:
        logger.warning("Unable to reach https://a.blob.core.windows.net/c?sv=1&sig=abc123&se=2030")
    finally:
        logger.remove()

    err = capsys.readouterr().err
    assert "abc123" not in err
    assert f"sig={REDACTED}&se=2030" in err


def test_scrub_text():
    assert scrub_text("DefaultEndpointsProtocol=https;AccountName=a;AccountKey=a2V5==;") == (
        f"DefaultEndpointsProtocol=https;AccountName=a;AccountKey={REDACTED};"
    )
    assert scrub_text("https://b.s3.amazonaws.com/feed/") == "https://b.s3.amazonaws.com/feed/"
