# -*- coding: utf-8 -*-
"""
Maintenance commands

    flask init-db
    flask prune-media --older-than 48
"""
from datetime import timedelta

import click
from flask import Flask, current_app

from homesite import db


def register_commands(app: Flask) -> None:
    """註冊 flask CLI 指令"""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        from homesite import models  # noqa: F401

        db.create_all()
        click.echo(f"Database initialised: {current_app.config['SQLALCHEMY_DATABASE_URI']}")

    @app.cli.command('prune-media')
    @click.option('--older-than', 'older_than', type=int, default=None,
                  help='Age threshold in hours (default: ORPHAN_MEDIA_TTL_HOURS).')
    def prune_media(older_than):
        """Delete uploaded media that was never attached to a post."""
        from homesite.services.media_service import MediaService

        hours = older_than if older_than is not None else current_app.config['ORPHAN_MEDIA_TTL_HOURS']
        removed = MediaService(db.session).prune_orphans(timedelta(hours=hours))
        click.echo(f"Removed {removed} orphaned media older than {hours}h")
