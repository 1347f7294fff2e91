from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, Request
from telegram import Update
from telegram.error import BadRequest
from telegram.ext import Application, ApplicationBuilder, CommandHandler, ContextTypes, MessageHandler, filters

from .services.ingest import TelegramIngest

logger = logging.getLogger(__name__)

INGEST_KEY = 'ingest'


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    if message:
        await message.reply_text('Send a file, photo, video or audio. I will store it and reply with its link.')


async def _store(update: Update, context: ContextTypes.DEFAULT_TYPE, file_id: str, suggested_name: Optional[str]) -> None:
    message = update.effective_message
    ingest: TelegramIngest = context.bot_data[INGEST_KEY]

    try:
        tg_file = await context.bot.get_file(file_id)
    except BadRequest as exc:
        if 'File is too big' in exc.message:
            await message.reply_text('The file exceeds the Telegram limit for bots (20 MB).')
            return
        raise

    result = await ingest.ingest(
        lambda target: tg_file.download_to_drive(custom_path=target),
        suggested_name,
        tg_file.file_path,
    )
    await message.reply_text(f'Saved: {result.url}')


async def save_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    document = update.effective_message.document
    await _store(update, context, document.file_id, document.file_name or 'file')


async def save_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    largest = update.effective_message.photo[-1]
    await _store(update, context, largest.file_id, 'photo.jpg')


async def save_video(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    video = update.effective_message.video
    await _store(update, context, video.file_id, video.file_name or 'video.mp4')


async def save_audio(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    audio = update.effective_message.audio
    await _store(update, context, audio.file_id, audio.file_name or 'audio.mp3')


def build_bot(token: str, ingest: TelegramIngest, webhook: bool = False) -> Application:
    builder = ApplicationBuilder().token(token)
    if webhook:
        builder = builder.updater(None)
    application = builder.build()
    application.bot_data[INGEST_KEY] = ingest

    application.add_handler(CommandHandler('start', start))
    application.add_handler(MessageHandler(filters.Document.ALL, save_document))
    application.add_handler(MessageHandler(filters.PHOTO, save_photo))
    application.add_handler(MessageHandler(filters.VIDEO, save_video))
    application.add_handler(MessageHandler(filters.AUDIO, save_audio))
    return application


async def start_bot(application: Application, webhook_url: Optional[str] = None) -> None:
    await application.initialize()
    if webhook_url:
        await application.bot.set_webhook(webhook_url)
        logger.info('Telegram bot: webhook set %s', webhook_url)
    else:
        await application.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        logger.info('Telegram bot: long polling')
    await application.start()


async def stop_bot(application: Application) -> None:
    if application.updater and application.updater.running:
        await application.updater.stop()
    await application.stop()
    await application.shutdown()


async def telegram_webhook(request: Request):
    application: Optional[Application] = request.app.state.bot
    if application is None:
        raise HTTPException(status_code=404, detail='Telegram bot disabled')
    update = Update.de_json(await request.json(), application.bot)
    await application.update_queue.put(update)
    return {'ok': True}
