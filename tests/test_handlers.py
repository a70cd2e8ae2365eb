import types

import pytest
from telegram.error import TelegramError

from cah_bot.game.game_manager import GameManager
from cah_bot.game.players import real
from cah_bot.handlers import cah_handlers

# ---- Utilities ------------------------------------------------

CHAT_ID = -100


class DummyBot:
    """Collects outbound messages instead of hitting Telegram."""
    def __init__(self, unreachable=()):
        self.sent = []
        self.unreachable = set(unreachable)

    async def send_message(self, chat_id, text, **kwargs):
        if chat_id in self.unreachable:
            raise TelegramError("Forbidden: bot can't initiate conversation with a user")
        self.sent.append((chat_id, text, kwargs))

    def texts_to(self, chat_id):
        return [text for cid, text, _ in self.sent if str(cid) == str(chat_id)]


class DummyMessage:
    def __init__(self):
        self.replies = []

    async def reply_text(self, text, **kwargs):
        self.replies.append(text)


class DummyQuery:
    def __init__(self, data, user):
        self.data = data
        self.from_user = user
        self.answers = []
        self.edits = []
        self.markups = []

    async def answer(self, text=None, show_alert=False):
        self.answers.append((text, show_alert))

    async def edit_message_text(self, text, **kwargs):
        self.edits.append(text)

    async def edit_message_reply_markup(self, reply_markup=None):
        self.markups.append(reply_markup)


def _user(user_id, name):
    return types.SimpleNamespace(id=user_id, first_name=name)


def _context(bot, bot_data, args=(), user_data=None):
    return types.SimpleNamespace(
        bot=bot, bot_data=bot_data, args=list(args),
        user_data={} if user_data is None else user_data,
    )


def _command_update(user):
    return types.SimpleNamespace(
        message=DummyMessage(),
        effective_user=user,
        effective_chat=types.SimpleNamespace(id=CHAT_ID),
    )


def _callback_update(data, user):
    query = DummyQuery(data, user)
    return types.SimpleNamespace(callback_query=query, effective_user=user), query


async def _run(bot, bot_data, user, *args):
    update = _command_update(user)
    await cah_handlers.cah_command(update, _context(bot, bot_data, args))
    return update.message.replies


# ---- Fixtures -------------------------------------------------

@pytest.fixture
def table(deck, rng):
    """Bot, shared bot_data and a manager wired to the judging board announcer."""
    bot = DummyBot()
    manager = GameManager(deck, rng)
    bot_data = {"game_manager": manager}
    application = types.SimpleNamespace(bot=bot, bot_data=bot_data)
    manager.add_round_complete_listener(cah_handlers.make_round_complete_announcer(application))
    return bot, bot_data


ALICE = _user(1, "Alice")
BOB = _user(2, "Bob")

# ---- Tests ----------------------------------------------------


@pytest.mark.asyncio
async def test_join_sends_hand_privately(table):
    bot, bot_data = table
    await _run(bot, bot_data, ALICE, "start")

    replies = await _run(bot, bot_data, BOB, "join")

    assert "Bob" in replies[0]
    private = bot.texts_to(BOB.id)
    assert len(private) == 1
    assert "<b>10.</b>" in private[0]


@pytest.mark.asyncio
async def test_join_falls_back_when_dm_is_blocked(deck, rng):
    bot = DummyBot(unreachable={BOB.id})
    bot_data = {"game_manager": GameManager(deck, rng)}
    await _run(bot, bot_data, ALICE, "start")

    replies = await _run(bot, bot_data, BOB, "join")

    assert any("couldn't message you privately" in r for r in replies)


@pytest.mark.asyncio
async def test_rejections_are_reported_to_the_caller(table):
    bot, bot_data = table
    await _run(bot, bot_data, ALICE, "start")

    replies = await _run(bot, bot_data, ALICE, "round")
    assert "Need at least 2 players" in replies[0]

    replies = await _run(bot, bot_data, BOB, "solo", "on")
    assert "Only the judge" in replies[0]


@pytest.mark.asyncio
async def test_full_round_through_handlers(table):
    bot, bot_data = table
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")

    replies = await _run(bot, bot_data, ALICE, "round")
    assert "I can't believe _____." in replies[0]

    await _run(bot, bot_data, BOB, "play", "1")

    # Judging board posted to the group with one button per submission
    board_messages = [(t, kw) for cid, t, kw in bot.sent if cid == str(CHAT_ID) and "Judge Pick" in t]
    assert len(board_messages) == 1
    markup = board_messages[0][1]["reply_markup"]
    pick_data = markup.inline_keyboard[0][0].callback_data
    game_id = (await bot_data["game_manager"].get_summary(str(CHAT_ID))).game_id
    assert pick_data == f"cahpick|{CHAT_ID}|{game_id}|1|u:{BOB.id}"

    # Bob can't pick for the judge
    update, query = _callback_update(pick_data, BOB)
    await cah_handlers.handle_judge_pick(update, _context(bot, bot_data))
    assert query.answers[-1][1] is True
    assert "Only the judge" in query.answers[-1][0]

    update, query = _callback_update(pick_data, ALICE)
    await cah_handlers.handle_judge_pick(update, _context(bot, bot_data))
    assert query.answers[-1] == (None, False)
    assert "Winner:</b> Bob" in query.edits[0]

    replies = await _run(bot, bot_data, ALICE, "scores")
    assert "Bob - <b>1</b>" in replies[0]

    # The same button again refers to a finished round
    update, query = _callback_update(pick_data, ALICE)
    await cah_handlers.handle_judge_pick(update, _context(bot, bot_data))
    assert query.answers[-1][1] is True


@pytest.mark.asyncio
async def test_card_picker_submits_after_enough_taps(two_blank_deck, rng):
    bot = DummyBot()
    bot_data = {"game_manager": GameManager(two_blank_deck, rng)}
    user_data = {}
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")
    await _run(bot, bot_data, ALICE, "round")

    update = _command_update(BOB)
    await cah_handlers.cah_command(update, _context(bot, bot_data, ["play"], user_data))
    picker = bot.sent[-1][2]["reply_markup"]
    first = picker.inline_keyboard[2][0].callback_data
    second = picker.inline_keyboard[0][0].callback_data

    update, query = _callback_update(first, BOB)
    await cah_handlers.handle_card_pick(update, _context(bot, bot_data, user_data=user_data))
    assert query.markups and query.edits == []

    update, query = _callback_update(second, BOB)
    await cah_handlers.handle_card_pick(update, _context(bot, bot_data, user_data=user_data))
    assert "Submitted" in query.edits[0]
    assert query.answers[-1] == (None, False)

    summary = await bot_data["game_manager"].get_summary(str(CHAT_ID))
    assert summary.phase == "judging"
    assert list(user_data["card_picks"]) == [str(CHAT_ID)]


@pytest.mark.asyncio
async def test_play_without_round_is_explained(table):
    bot, bot_data = table
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")

    replies = await _run(bot, bot_data, BOB, "play")
    assert "No active round" in replies[0]

    replies = await _run(bot, bot_data, BOB, "play", "x")
    assert "whole numbers" in replies[0]


def test_render_filled_escapes_and_bolds():
    text = cah_handlers.render_filled("<Why> {blank} and {blank}?", ["a & b"])
    assert text == "&lt;Why&gt; <b>a &amp; b</b> and _____?"


async def _open_picker(bot, bot_data, user, user_data):
    """Run /cah play without card numbers so the picker is sent privately."""
    update = _command_update(user)
    await cah_handlers.cah_command(update, _context(bot, bot_data, ["play"], user_data))
    return update


@pytest.mark.asyncio
async def test_picker_state_keeps_one_entry_per_chat(table):
    bot, bot_data = table
    manager = bot_data["game_manager"]
    user_data = {}
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")
    await _run(bot, bot_data, ALICE, "round")

    await _open_picker(bot, bot_data, BOB, user_data)
    old_button = bot.sent[-1][2]["reply_markup"].inline_keyboard[0][0].callback_data
    await _run(bot, bot_data, BOB, "play", "1")
    await manager.judge_pick(str(CHAT_ID), real(ALICE.id), real(BOB.id))
    await _run(bot, bot_data, ALICE, "round")

    await _open_picker(bot, bot_data, BOB, user_data)

    assert list(user_data["card_picks"]) == [str(CHAT_ID)]
    (game_id, round_number), picks = user_data["card_picks"][str(CHAT_ID)]
    assert round_number == 2 and picks == []

    # A button from the finished round is refused and leaves the selection alone
    update, query = _callback_update(old_button, BOB)
    await cah_handlers.handle_card_pick(update, _context(bot, bot_data, user_data=user_data))
    assert query.answers[-1][1] is True
    assert user_data["card_picks"][str(CHAT_ID)] == ((game_id, 2), [])


@pytest.mark.asyncio
async def test_picker_from_an_earlier_game_is_refused(table):
    bot, bot_data = table
    user_data = {}
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")
    await _run(bot, bot_data, ALICE, "round")
    await _open_picker(bot, bot_data, BOB, user_data)
    old_button = bot.sent[-1][2]["reply_markup"].inline_keyboard[0][0].callback_data

    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, BOB, "join")
    await _run(bot, bot_data, ALICE, "round")

    update, query = _callback_update(old_button, BOB)
    await cah_handlers.handle_card_pick(update, _context(bot, bot_data, user_data=user_data))

    assert query.answers[-1][1] is True
    assert "isn't active" in query.answers[-1][0]
    assert (await bot_data["game_manager"].get_summary(str(CHAT_ID))).submitted == 0


@pytest.mark.asyncio
async def test_solo_picker_seats_a_player_who_has_not_joined(table):
    bot, bot_data = table
    carol = _user(3, "Carol")
    await _run(bot, bot_data, ALICE, "start")
    await _run(bot, bot_data, ALICE, "solo", "on")
    await _run(bot, bot_data, ALICE, "round")

    update = await _open_picker(bot, bot_data, carol, {})

    assert update.message.replies == []
    chat_id, _, kwargs = bot.sent[-1]
    assert chat_id == carol.id
    assert len(kwargs["reply_markup"].inline_keyboard) == 10
    summary = await bot_data["game_manager"].get_summary(str(CHAT_ID))
    assert real(carol.id) in summary.players
