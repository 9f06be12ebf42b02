"""console 模块 - 管理コンソール的画面组装。"""
from .sections import Section, build_sections, SECTION_BUILDERS
from .admin import AdminConsole

__all__ = ["Section", "build_sections", "SECTION_BUILDERS", "AdminConsole"]
