"""
Card Game Command Handlers

This module connects Telegram to the game manager. It parses the /cah
command and inline button callbacks, sends hands and card pickers to
players in private chat, and renders results for the group.
"""

import html
from typing import Dict, List, Optional, Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes

from ..game.deck import BLANK_MARKER
from ..game.errors import GameError, NotFound, PreconditionFailed
from ..game.game_manager import GameManager
from ..game.players import (
    PlayerId, RealPlayer, display_name, parse_player_token, player_token, real,
)
from ..game.prompts import fill_prompt
from ..game.results import HandView, JudgingBoard, ScoreLine
from ..utils.logging_config import get_logger, log_user_action

# Logger setup
logger = get_logger(__name__)

CARD_CALLBACK = "cahcard"
PICK_CALLBACK = "cahpick"
BLANK_DISPLAY = "_____"

HELP_TEXT = (
    "🃏 <b>Fill in the Blank</b>\n\n"
    "<b>/cah start</b> - start or reset a game here (you become judge)\n"
    "<b>/cah join</b> - join the game, your hand arrives in private chat\n"
    "<b>/cah leave</b> - leave the game\n"
    "<b>/cah hand</b> - show your hand again\n"
    "<b>/cah round</b> - judge starts the next round\n"
    "<b>/cah play</b> - pick your cards (or <code>/cah play 3 7</code>)\n"
    "<b>/cah scores</b> - show the score table\n"
    "<b>/cah solo on|off</b> - judge toggles solo mode against NPCs\n"
    "<b>/cah status</b> - show the current round\n\n"
    "💡 Start a private chat with me first so I can send you your cards."
)


def escape(text: str) -> str:
    """HTML-escape message text. Quotes are left alone."""
    return html.escape(text, quote=False)


def get_manager(context: ContextTypes.DEFAULT_TYPE) -> GameManager:
    return context.bot_data["game_manager"]


def _names(bot_data: Dict) -> Dict[str, str]:
    return bot_data.setdefault("display_names", {})


def remember_user(context: ContextTypes.DEFAULT_TYPE, user) -> RealPlayer:
    """Record the user's first name for rendering and return their player id."""
    player = real(user.id)
    _names(context.bot_data)[player.user_id] = user.first_name or f"Player {user.id}"
    return player


def player_name(bot_data: Dict, player: PlayerId) -> str:
    if isinstance(player, RealPlayer):
        name = _names(bot_data).get(player.user_id)
        if name:
            return escape(name)
    return escape(display_name(player))


def render_prompt(prompt: Optional[str]) -> str:
    return escape(prompt or "").replace(BLANK_MARKER, BLANK_DISPLAY)


def render_filled(prompt: str, cards: Sequence[str]) -> str:
    """Filled prompt as HTML with the answers in bold."""
    filled = fill_prompt(
        escape(prompt),
        list(cards),
        highlight=lambda card: f"<b>{escape(card)}</b>",
    )
    return filled.replace(BLANK_MARKER, BLANK_DISPLAY)


def render_hand(cards: Sequence[str]) -> str:
    return "\n".join(f"<b>{i + 1}.</b> {escape(card)}" for i, card in enumerate(cards))


def render_scores(bot_data: Dict, lines: Sequence[ScoreLine]) -> str:
    if not lines:
        return "No scores yet."
    return "\n".join(f"• {player_name(bot_data, line.player)} - <b>{line.score}</b>" for line in lines)


def _chunk(items: List, size: int) -> List[List]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def build_card_picker(channel_id: str, view: HandView, selected: Sequence[int] = ()) -> InlineKeyboardMarkup:
    """One button per card. Selected cards are marked with their play order."""
    keyboard = []
    for idx, card in enumerate(view.cards):
        mark = f"[{list(selected).index(idx) + 1}] " if idx in selected else ""
        label = f"{mark}{idx + 1}. {card}"[:60]
        keyboard.append([InlineKeyboardButton(
            label, callback_data=f"{CARD_CALLBACK}|{channel_id}|{view.game_id}|{view.round_number}|{idx}"
        )])
    return InlineKeyboardMarkup(keyboard)


def build_judge_keyboard(board: JudgingBoard) -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(
            entry.label,
            callback_data=(
                f"{PICK_CALLBACK}|{board.channel_id}|{board.game_id}|"
                f"{board.round_number}|{player_token(entry.player)}"
            ),
        )
        for entry in board.entries
    ]
    return InlineKeyboardMarkup(_chunk(buttons, 4))


async def send_private(context: ContextTypes.DEFAULT_TYPE, user_id, text: str, **kwargs) -> bool:
    """Send a direct message, returning False if the user hasn't opened a chat with the bot."""
    try:
        await context.bot.send_message(chat_id=user_id, text=text, **kwargs)
        return True
    except TelegramError as e:
        logger.warning(f"Failed to send private message to user {user_id}: {e}")
        return False


def _hand_text(view: HandView, title: str) -> str:
    text = f"🂠 <b>{title}</b>\n\n{render_hand(view.cards)}"
    if view.current_prompt:
        text += f"\n\n<b>Prompt:</b> {render_prompt(view.current_prompt)}"
    return text


async def _deliver_hand(update: Update, context: ContextTypes.DEFAULT_TYPE, view: HandView, title: str) -> None:
    sent = await send_private(context, update.effective_user.id, _hand_text(view, title))
    if not sent:
        await update.message.reply_text(
            "📬 I couldn't message you privately. Open a chat with me, press Start, then use /cah hand."
        )


async def cah_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /cah <subcommand> in a group chat.

    Rejections from the game are shown to the caller; anything unexpected
    is logged and answered with a generic message.
    """
    if not update.message:
        logger.warning("cah_command called without a message object")
        return

    args = [a.lower() for a in (context.args or [])]
    sub = args[0] if args else "help"
    handler = SUBCOMMANDS.get(sub)
    user = update.effective_user
    log_user_action(user.id, f"cah_{sub}", chat_id=update.effective_chat.id)

    if handler is None:
        await update.message.reply_text(HELP_TEXT)
        return

    try:
        await handler(update, context, args[1:])
    except GameError as e:
        await update.message.reply_text(f"❌ {escape(e.message)}")
    except Exception as e:
        logger.error(f"Failed to handle /cah {sub} - chat_id: {update.effective_chat.id}, "
                     f"user_id: {user.id}, error: {str(e)}")
        await update.message.reply_text("⚠️ Something broke, but it's fixable. Please try again.")


async def _cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    await update.message.reply_text(HELP_TEXT)


async def _cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    caller = remember_user(context, update.effective_user)
    summary = await get_manager(context).reset(str(update.effective_chat.id), caller)
    await update.message.reply_text(
        "👑 <b>Game started in this chat.</b>\n\n"
        f"Judge: {player_name(context.bot_data, caller)}\n"
        "Players join with <code>/cah join</code>.\n"
        f"Solo mode: <b>{'ON' if summary.solo_mode else 'OFF'}</b> "
        "(toggle with <code>/cah solo on|off</code>)"
    )


async def _cmd_join(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    player = remember_user(context, update.effective_user)
    view = await get_manager(context).join(str(update.effective_chat.id), player)
    await update.message.reply_text(f"✅ {player_name(context.bot_data, player)} joined the game!")
    await _deliver_hand(update, context, view, "You joined the game. Here's your hand:")


async def _cmd_leave(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    player = remember_user(context, update.effective_user)
    await get_manager(context).leave(str(update.effective_chat.id), player)
    await update.message.reply_text(f"👋 {player_name(context.bot_data, player)} left the game.")


async def _cmd_hand(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    player = remember_user(context, update.effective_user)
    view = await get_manager(context).get_hand(str(update.effective_chat.id), player)
    await _deliver_hand(update, context, view, "Your hand")


async def _cmd_round(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    caller = remember_user(context, update.effective_user)
    started = await get_manager(context).start_round(str(update.effective_chat.id), caller)
    picks = started.required_picks
    await update.message.reply_text(
        f"🂡 <b>Round {started.round_number}{' (SOLO)' if started.solo_mode else ''}</b>\n\n"
        f"<b>Prompt:</b> {render_prompt(started.prompt)}\n\n"
        f"Pick: <b>{picks}</b> | Players: <b>{started.player_count}</b>\n\n"
        f"Submit with <code>/cah play</code> (your picker arrives in private chat)."
    )


def _picker_state(context: ContextTypes.DEFAULT_TYPE) -> Dict:
    """Per-user card selections: chat id -> ((game id, round), selected indices)."""
    return context.user_data.setdefault("card_picks", {})


def _parse_indices(args: Sequence[str]) -> List[int]:
    try:
        return [int(a) - 1 for a in args]
    except ValueError:
        raise PreconditionFailed("Card numbers must be whole numbers, e.g. /cah play 2 5")


async def _cmd_play(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    player = remember_user(context, update.effective_user)
    channel_id = str(update.effective_chat.id)
    manager = get_manager(context)

    if args:
        receipt = await manager.submit(channel_id, player, _parse_indices(args))
        await _announce_submission(context, channel_id, player)
        await send_private(
            context, update.effective_user.id,
            f"✅ <b>Submitted</b>\n\n{render_filled(receipt.prompt, receipt.cards)}"
            "\n\nHand replenished."
        )
        return

    summary = await manager.get_summary(channel_id)
    if summary is None or summary.phase != "collecting":
        await update.message.reply_text("No active round. The judge should run <code>/cah round</code>.")
        return

    if summary.solo_mode and player not in summary.players:
        # Solo mode seats anyone who wants to play, same as /cah play <n>
        view = await manager.join(channel_id, player)
    else:
        view = await manager.get_hand(channel_id, player)
    # One open picker per chat; a new picker replaces the old selection
    _picker_state(context)[channel_id] = ((view.game_id, view.round_number), [])
    sent = await send_private(
        context, update.effective_user.id,
        f"🂠 <b>Submit</b>\n\n<b>Prompt:</b> {render_prompt(view.current_prompt)}\n\n"
        f"Pick <b>{view.required_picks}</b> card{'s' if view.required_picks > 1 else ''} in order:",
        reply_markup=build_card_picker(channel_id, view),
    )
    if not sent:
        await update.message.reply_text(
            "📬 I couldn't message you privately. Open a chat with me and press Start, "
            "or play by number: <code>/cah play 3</code>"
        )


async def _cmd_scores(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    lines = await get_manager(context).get_scores(str(update.effective_chat.id))
    await update.message.reply_text(f"📈 <b>Scores</b>\n{render_scores(context.bot_data, lines)}")


async def _cmd_solo(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    if not args or args[0] not in ("on", "off"):
        await update.message.reply_text("Usage: <code>/cah solo on</code> or <code>/cah solo off</code>")
        return
    caller = remember_user(context, update.effective_user)
    summary = await get_manager(context).set_solo_mode(
        str(update.effective_chat.id), caller, args[0] == "on"
    )
    await update.message.reply_text(f"🧪 Solo mode is now <b>{'ON' if summary.solo_mode else 'OFF'}</b>.")


async def _cmd_status(update: Update, context: ContextTypes.DEFAULT_TYPE, args: List[str]) -> None:
    summary = await get_manager(context).get_summary(str(update.effective_chat.id))
    if summary is None:
        await update.message.reply_text("No game in this chat. Start one with <code>/cah start</code>.")
        return

    judge = player_name(context.bot_data, summary.judge) if summary.judge else "nobody"
    text = (
        f"🎮 <b>Game status</b>\n\n"
        f"Phase: <b>{summary.phase}</b>\n"
        f"Round: <b>{summary.round_number}</b>\n"
        f"Judge: {judge}\n"
        f"Players: <b>{len(summary.players)}</b>\n"
        f"Solo mode: <b>{'ON' if summary.solo_mode else 'OFF'}</b>"
    )
    if summary.current_prompt:
        text += (
            f"\n\n<b>Prompt:</b> {render_prompt(summary.current_prompt)}\n"
            f"Submissions: <b>{summary.submitted}</b>"
        )
    await update.message.reply_text(text)


SUBCOMMANDS = {
    "help": _cmd_help,
    "start": _cmd_start,
    "join": _cmd_join,
    "leave": _cmd_leave,
    "hand": _cmd_hand,
    "round": _cmd_round,
    "play": _cmd_play,
    "scores": _cmd_scores,
    "solo": _cmd_solo,
    "status": _cmd_status,
}


async def _announce_submission(context: ContextTypes.DEFAULT_TYPE, channel_id: str, player: PlayerId) -> None:
    try:
        await context.bot.send_message(
            chat_id=channel_id,
            text=f"📥 {player_name(context.bot_data, player)} submitted."
        )
    except TelegramError as e:
        logger.warning(f"Failed to announce submission - chat_id: {channel_id}, error: {e}")


async def handle_card_pick(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle a tap on a card in the private picker.

    Taps toggle a card in or out of the selection; once as many cards as
    the round needs are selected they are submitted in tap order.
    """
    query = update.callback_query
    player = remember_user(context, update.effective_user)
    manager = get_manager(context)
    alert: Optional[str] = None

    try:
        _, channel_id, game_id, round_str, idx_str = query.data.split("|")
        round_number, idx = int(round_str), int(idx_str)
    except (ValueError, AttributeError):
        await query.answer("❌ Invalid card picker", show_alert=True)
        return

    try:
        summary = await manager.get_summary(channel_id)
        if (summary is None or summary.phase != "collecting"
                or summary.game_id != game_id or summary.round_number != round_number):
            raise NotFound("Round isn't active anymore.")

        pickers = _picker_state(context)
        ref = (game_id, round_number)
        if channel_id not in pickers or pickers[channel_id][0] != ref:
            pickers[channel_id] = (ref, [])
        picks = pickers[channel_id][1]
        if idx in picks:
            picks.remove(idx)
        else:
            picks.append(idx)

        if len(picks) < summary.required_picks:
            view = await manager.get_hand(channel_id, player)
            await query.edit_message_reply_markup(reply_markup=build_card_picker(channel_id, view, picks))
        else:
            chosen = list(picks)
            picks.clear()
            receipt = await manager.submit(channel_id, player, chosen, round_number, game_id)
            await query.edit_message_text(
                f"✅ <b>Submitted</b>\n\n{render_filled(receipt.prompt, receipt.cards)}"
                "\n\nHand replenished."
            )
            await _announce_submission(context, channel_id, player)
    except GameError as e:
        alert = f"❌ {e.message}"
    except Exception as e:
        logger.error(f"Failed to handle card pick - user_id: {player.user_id}, error: {str(e)}")
        alert = "⚠️ Something broke, but it's fixable. Please try again."

    await query.answer(alert, show_alert=bool(alert))


async def handle_judge_pick(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the judge tapping a submission label."""
    query = update.callback_query
    caller = remember_user(context, update.effective_user)
    alert: Optional[str] = None

    try:
        _, channel_id, game_id, round_str, token = query.data.split("|", 4)
        round_number = int(round_str)
        winner = parse_player_token(token)
    except (ValueError, AttributeError):
        await query.answer("❌ Invalid pick", show_alert=True)
        return

    try:
        resolution = await get_manager(context).judge_pick(channel_id, caller, winner, round_number, game_id)
        summary = await get_manager(context).get_summary(channel_id)
        await query.edit_message_text(
            f"🏆 <b>Winner:</b> {player_name(context.bot_data, resolution.winner)}\n"
            f"{render_filled(resolution.prompt, resolution.cards)}\n\n"
            f"📈 <b>Scores</b>\n{render_scores(context.bot_data, resolution.scores)}\n\n"
            f"Judge starts the next round with <code>/cah round</code>.\n"
            f"Solo mode: <b>{'ON' if summary and summary.solo_mode else 'OFF'}</b>"
        )
    except GameError as e:
        alert = f"❌ {e.message}"
    except Exception as e:
        logger.error(f"Failed to handle judge pick - user_id: {caller.user_id}, error: {str(e)}")
        alert = "⚠️ Something broke, but it's fixable. Please try again."

    await query.answer(alert, show_alert=bool(alert))


def make_round_complete_announcer(application: Application):
    """
    Build the listener that posts the judging board to the group.

    Submissions are revealed anonymously as A, B, C... with one button per
    submission for the judge.
    """
    async def announce_round_complete(board: JudgingBoard) -> None:
        bot_data = application.bot_data
        reveal = "\n\n".join(
            f"<b>{entry.label}.</b> {render_filled(board.prompt, entry.cards)}"
            for entry in board.entries
        )
        judge = player_name(bot_data, board.judge) if board.judge else "Judge"
        await application.bot.send_message(
            chat_id=board.channel_id,
            text=(
                f"🗳️ <b>Judge Pick</b> - round {board.round_number}\n\n"
                f"<b>Prompt:</b> {render_prompt(board.prompt)}\n\n{reveal}\n\n"
                f"{judge}, pick the winner:"
            ),
            reply_markup=build_judge_keyboard(board),
        )
        logger.info(f"Judging board posted - chat_id: {board.channel_id}, entries: {len(board.entries)}")

    return announce_round_complete
