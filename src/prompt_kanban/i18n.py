"""User-facing strings in English and Chinese."""

import os

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        # Notices
        "fileCreated": "File {0} created",
        "createFileFailed": "Failed to create file",
        "fileDeleted": 'File "{0}" deleted',
        "deleteFileFailed": "Failed to delete file",
        "contentCopied": "Version content copied to clipboard",
        "newVersionCreated": "New version {0} created in file {1}",
        "iterateFileFailed": "Failed to create a new version",
        "kanbanActivated": "Kanban view for current folder activated",
        "kanbanOpened": "Kanban view opened for current folder",
        "quickAccessDisabled": "Quick access is turned off in settings",
        "cannotGetFolderPath": (
            "Cannot get current folder path. Please ensure you are in an open file."
        ),
        "cannotOpenKanban": (
            "Cannot open kanban view. Please ensure there is available panel space on the right."
        ),
        "invalidFolderPath": "Current kanban folder path is invalid",
        # View text
        "viewTitle": "Kanban: {0}",
        "empty": "Empty",
        "noMatchingFiles": 'No files matching "{0}" found.',
        "noMarkdownFiles": "This folder has no Markdown files yet.",
        "folderInvalidOrNotExists": "Folder {0} is invalid or does not exist.",
        # Confirmation dialog
        "confirmDeleteFile": 'Are you sure you want to delete file "{0}"?',
        "deleteWarning": "This action cannot be undone. The file will be permanently deleted.",
        # Settings
        "showRibbonIcon": "Show Ribbon Icon",
    },
    "zh": {
        "fileCreated": "文件 {0} 已创建",
        "createFileFailed": "创建文件失败",
        "fileDeleted": '文件 "{0}" 已删除',
        "deleteFileFailed": "删除文件失败",
        "contentCopied": "版本内容已复制到剪贴板",
        "newVersionCreated": "新版本 {0} 已在文件 {1} 中创建",
        "iterateFileFailed": "创建新版本失败",
        "kanbanActivated": "当前文件夹的看板视图已激活",
        "kanbanOpened": "已为当前文件夹打开看板视图",
        "quickAccessDisabled": "快捷按钮已在设置中关闭",
        "cannotGetFolderPath": "无法获取当前文件夹路径。请确保您在一个打开的文件中点击此按钮。",
        "cannotOpenKanban": "无法打开看板视图，请确保右侧有可用的面板空间。",
        "invalidFolderPath": "当前看板的文件夹路径无效",
        "viewTitle": "看板: {0}",
        "empty": "空空如也",
        "noMatchingFiles": '没有找到与 "{0}" 匹配的文件。',
        "noMarkdownFiles": "这个文件夹还没有 Markdown 文件。",
        "folderInvalidOrNotExists": "文件夹 {0} 无效或不存在。",
        "confirmDeleteFile": '您确定要删除文件 "{0}" 吗？',
        "deleteWarning": "此操作无法撤销。文件将被永久删除。",
        "showRibbonIcon": "显示侧边栏按钮",
    },
}

DEFAULT_LOCALE = "en"


def detect_locale() -> str:
    """Pick "zh" or "en" from the usual locale environment variables."""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var)
        if value:
            return "zh" if value.lower().startswith("zh") else DEFAULT_LOCALE
    return DEFAULT_LOCALE


class Translator:
    """Resolve a message key plus positional arguments to text.

    Unknown keys fall back to English, then to the key itself.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale if locale in TRANSLATIONS else DEFAULT_LOCALE

    def __call__(self, key: str, *args: object) -> str:
        text = TRANSLATIONS[self.locale].get(key) or TRANSLATIONS[DEFAULT_LOCALE].get(key) or key
        for index, arg in enumerate(args):
            text = text.replace(f"{{{index}}}", str(arg))
        return text
