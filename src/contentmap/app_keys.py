"""Application keys for type-safe app configuration access."""

from aiohttp import web

from contentmap.config import Config
from contentmap.mapper import ContentMapper

config_key = web.AppKey("config", Config)
mapper_key = web.AppKey("mapper", ContentMapper)
