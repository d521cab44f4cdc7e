from loguru import logger

from prompt_kanban.cli import app


def main() -> None:
    logger.debug("Starting prompt-kanban")
    app()


if __name__ == "__main__":
    main()
