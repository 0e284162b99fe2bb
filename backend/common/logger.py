# Copyright (c) 2025 Efstratios Goudelis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.


import logging.config
import logging
import yaml
from .arguments import arguments


def get_logger_config(args):
    """
    Loads a logging configuration.

    This function retrieves the logging configuration in YAML format
    from the file path provided in the arguments and returns it as a Python
    dictionary. The same dictionary is handed to uvicorn so that both the
    bridge and the HTTP server log to stderr; stdout is reserved for the
    protocol stream.

    :param args: Parsed arguments containing the file path to the logging configuration.
    :type args: argparse.Namespace
    :return: Python dictionary with logging configuration.
    :rtype: dict
    :raises FileNotFoundError: If the specified logging configuration file cannot be found.
    :raises yaml.YAMLError: If the YAML configuration file cannot be parsed due to invalid syntax.
    """

    def yaml_to_dict_config(filepath):
        with open(filepath, "r") as file:
            return yaml.safe_load(file)

    logging_config = yaml_to_dict_config(args.log_config)

    return logging_config


def get_logger(args):
    """
    Obtains a logger instance configured according to the given logging configuration.

    :param args: The command-line arguments containing the path to the logging
                 configuration file (YAML format) and the log level.
    :type args: argparse.Namespace
    :return: A logger instance named "cfti-http".
    :rtype: logging.Logger
    """
    logging_config = get_logger_config(args)

    logging.config.dictConfig(logging_config)

    # The protocol engine loggers follow the requested level as well
    for name in (
        "cfti-http",
        "cfti-interpreter",
        "cfti-outgoing",
        "cfti-state",
        "cfti-bridge",
        "cfti-events",
    ):
        logging.getLogger(name).setLevel(args.log_level)

    log = logging.getLogger("cfti-http")

    return log


# setup a logger
logger = get_logger(arguments)
