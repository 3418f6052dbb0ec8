"""Tests for the stdlib logging and structlog adapters."""

import io
import json
import logging
import logging.config

import pytest
import structlog

from serialog.events import context as ndc
from serialog.handlers import SerializedFormatter, SerializedRenderer
from serialog.layout.serialized import SerializedLayout


@pytest.fixture
def capture():
    """A private logger whose output is collected in a StringIO."""

    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    logger = logging.getLogger("serialog.tests.capture")
    logger.handlers = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    def _lines():
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    yield logger, handler, _lines

    logger.handlers = []
    logger.filters = []


class TestSerializedFormatter:
    """JSON documents from LogRecords."""

    def test_arrangement(self, capture):
        logger, handler, lines = capture
        handler.setFormatter(SerializedFormatter("level;message;tenant"))

        logger.info("hi %s", "bob", extra={"tenant": "acme"})

        assert lines() == [{"level": "INFO", "message": "hi bob", "tenant": "acme"}]

    def test_exception(self, capture):
        logger, handler, lines = capture
        handler.setFormatter(SerializedFormatter("message;exception"))

        try:
            raise ValueError("bad input")
        except ValueError:
            logger.exception("failed")

        document = lines()[0]
        assert document["message"] == "failed"
        assert document["exception"].startswith("Traceback")
        assert document["exception"].endswith("ValueError: bad input")

    def test_context_stack(self, capture):
        logger, handler, lines = capture
        handler.setFormatter(SerializedFormatter("ndc|%ndc;message"))

        with ndc.nested("job 7"):
            logger.info("inside")
        logger.info("outside")

        assert lines() == [{"ndc": "job 7", "message": "inside"}, {"message": "outside"}]

    def test_prebuilt_layout(self, capture):
        logger, handler, lines = capture
        handler.setFormatter(SerializedFormatter(layout=SerializedLayout(conversion_pattern="level")))

        logger.warning("x")

        assert lines() == [{"level": "WARNING"}]

    def test_flatten(self, capture):
        logger, handler, lines = capture
        handler.setFormatter(SerializedFormatter("user%property:user", flatten=True))

        logger.info("x", extra={"user": {"id": 1, "email": None}})

        assert lines() == [{"user.id": 1}]

    def test_dict_config(self, capture):
        logger, _, _ = capture
        stream = io.StringIO()

        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "serialog.handlers.SerializedFormatter",
                        "arrangement": "Severity:level;Text:message",
                    },
                },
                "handlers": {
                    "memory": {
                        "class": "logging.StreamHandler",
                        "formatter": "json",
                        "stream": stream,
                    },
                },
                "loggers": {
                    "serialog.tests.capture": {"handlers": ["memory"], "level": "INFO", "propagate": False},
                },
            }
        )

        logger.info("configured")

        assert json.loads(stream.getvalue()) == {"Severity": "INFO", "Text": "configured"}


class TestSerializedRenderer:
    """JSON documents from structlog event dicts."""

    def test_direct_call(self):
        renderer = SerializedRenderer("level;message;request_id")

        output = renderer(None, "info", {"event": "hello", "request_id": "r1"})

        assert json.loads(output) == {"level": "INFO", "message": "hello", "request_id": "r1"}

    def test_logger_name_from_wrapped_logger(self):
        class Named:
            name = "svc.api"

        renderer = SerializedRenderer("logger")

        assert renderer(Named(), "info", {"event": "x"}) == '{"logger":"svc.api"}'

    def test_in_processor_chain(self):
        log = structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[structlog.processors.add_log_level, SerializedRenderer("level;message;account")],
        )

        output = log.warning("signed in", account="bob")

        assert json.loads(output) == {"level": "WARNING", "message": "signed in", "account": "bob"}
