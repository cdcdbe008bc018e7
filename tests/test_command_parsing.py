from __future__ import annotations

import pytest

from db.models import BossEntry, ScheduleRecord
from services.command_service import (
    KIND_CLEAR,
    KIND_CREATE,
    KIND_DEBUG,
    KIND_LIST,
    KIND_REMOVE,
    KIND_RUN,
    CommandUsageError,
    find_boss_token_index,
    format_schedule_line,
    parse_command,
    parse_create_request,
    render_alert,
)


CHANNEL = "123456789012345678"
ROLE = "876543210987654321"


@pytest.mark.parametrize(
    ("content", "kind", "argument"),
    [
        ("!agenda 18:30 <#1> <@&2> dragon", KIND_CREATE, None),
        ("!lista", KIND_LIST, None),
        ("!listaschedules", KIND_LIST, None),
        ("!remover 1760000000000", KIND_REMOVE, "1760000000000"),
        ("!removeschedule 99", KIND_REMOVE, "99"),
        ("!limpar", KIND_CLEAR, None),
        ("!run 17", KIND_RUN, "17"),
        ("!remover", KIND_REMOVE, None),
        ("!run", KIND_RUN, None),
        ("!debug", KIND_DEBUG, None),
        ("  !debugschedules  ", KIND_DEBUG, None),
    ],
)
def test_parse_command_recognizes_every_keyword(content, kind, argument):
    parsed = parse_command(content)

    assert parsed is not None
    assert parsed.kind == kind
    assert parsed.argument == argument


@pytest.mark.parametrize("content", ["", "hello", "!agenda", "!lista extra", "!limparall", "!runner 1", "agenda 18:30"])
def test_unrecognized_text_is_ignored(content):
    assert parse_command(content) is None


def test_create_prefers_mentions_over_positional_tokens():
    request = parse_create_request(
        f"!agenda 18:30 <#{CHANNEL}> <@&{ROLE}> dragon",
        channel_mention_id=CHANNEL,
        role_mention_id=ROLE,
    )

    assert request.time == "18:30"
    assert request.channel_id == CHANNEL
    assert request.role_id == ROLE
    assert request.boss_key == "dragon"
    assert request.extra_text == ""


def test_create_falls_back_to_digits_of_positional_tokens():
    request = parse_create_request(f"!agenda 07:05 {CHANNEL} {ROLE} kraken bring   potions now")

    assert request.channel_id == CHANNEL
    assert request.role_id == ROLE
    assert request.boss_key == "kraken"
    assert request.extra_text == "bring potions now"


def test_plain_hash_and_at_tokens_are_never_boss_keys():
    request = parse_create_request(
        "!agenda 18:30 #boss-alerts @Raiders dragon",
        channel_mention_id=CHANNEL,
        role_mention_id=ROLE,
    )

    assert request.boss_key == "dragon"


def test_unknown_bare_id_becomes_boss_key():
    other = "111111111111111111"
    parts = ["!agenda", "18:30", other, "dragon"]

    assert find_boss_token_index(parts, channel_id=CHANNEL, role_id=ROLE) == 2


@pytest.mark.parametrize("time_token", ["1830", "8:30", "18:3", "aa:bb", "24:00", "18:60"])
def test_bad_time_is_rejected_with_usage(time_token):
    with pytest.raises(CommandUsageError) as excinfo:
        parse_create_request(f"!agenda {time_token} <#{CHANNEL}> <@&{ROLE}> dragon", channel_mention_id=CHANNEL, role_mention_id=ROLE)

    assert "hora inválida" in excinfo.value.reply


def test_missing_boss_key_is_rejected():
    with pytest.raises(CommandUsageError, match="nome do boss"):
        parse_create_request(f"!agenda 18:30 <#{CHANNEL}> <@&{ROLE}>", channel_mention_id=CHANNEL, role_mention_id=ROLE)


def test_missing_role_is_rejected():
    with pytest.raises(CommandUsageError, match="Canal ou Role inválidos"):
        parse_create_request(f"!agenda 18:30 <#{CHANNEL}> dragon", channel_mention_id=CHANNEL)


def test_render_with_catalog_entry_uses_template_and_image():
    entry = BossEntry(key="dragon", titulo="Ancient Dragon", imagem="http://x/d.png")

    rendered = render_alert(boss_key="dragon", extra_text="", entry=entry)

    assert rendered.boss == "Ancient Dragon"
    assert rendered.message == "A preparação para o boss **Ancient Dragon** vai terminar em 10 minutos!"
    assert rendered.image == "http://x/d.png"


def test_render_with_catalog_entry_prefixes_extra_text():
    entry = BossEntry(key="dragon", titulo=None, imagem=None)

    rendered = render_alert(boss_key="DRAGON", extra_text="bring potions", entry=entry)

    assert rendered.boss == "dragon"
    assert rendered.message == "bring potions\nA preparação para o boss **dragon** vai terminar em 10 minutos!"
    assert rendered.image is None


def test_render_without_catalog_entry():
    assert render_alert(boss_key="hydra", extra_text="bring potions", entry=None).message == "bring potions"

    fallback = render_alert(boss_key="hydra", extra_text="", entry=None)
    assert fallback.message == "Mensagem agendada (hydra)"
    assert fallback.boss == "hydra"
    assert fallback.image is None


def test_schedule_line_marks_missing_boss_and_message():
    record = ScheduleRecord(id="9", time="06:00", channel_id="1", role_id="2", boss=None, message="")

    line = format_schedule_line(record)

    assert line == "ID:9 - 06:00 - Boss: (não informado) - Mensagem: (vazia) - Canal: <#1> - Role: <@&2>"
