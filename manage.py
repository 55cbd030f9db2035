#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main module of the program, executable."""
import asyncio
import logging

from tornado.options import define, options
import tornado.options

from app.application import make_app
from app.environs import env


define("port", default=env.PORT, help="run on the given port", type=int)

logger = logging.getLogger(__name__)


async def main():
	"""Main function of the program."""
	# Also sets up tornado logging (--logging=debug etc).
	tornado.options.parse_command_line()

	server = make_app()
	server.listen(options.port)
	logger.info(
		'Listening on port %s, version %s, carriers: %s (default: %s)',
		options.port,
		server.version,
		', '.join(server.registry.carriers),
		server.registry.default
	)
	await asyncio.Event().wait()


if __name__ == "__main__":
	asyncio.run(main())
