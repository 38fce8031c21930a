"""Central definitions of navigable sections, roles and their default grants.

Section keys are stable identifiers; never rename one silently. Add the old
spelling to SECTION_ALIASES instead so stored grants and account snapshots
keep resolving.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

# Roles that always see every section and can never be restricted
LOCKED_ROLES = frozenset({'ADMIN', 'DIRECTOR'})

SECTION_ACTIONS = ('VIEW', 'CREATE', 'UPDATE', 'DELETE', 'MANAGE')
DEFAULT_SECTION_ACTIONS = ['VIEW']

ATTENDANCE_KEY = 'attendance'

# Keys removed from the product; dropped from every working set
DEPRECATED_KEYS = frozenset({'employeeinfo'})

# canonical key -> how older spellings and related sections are recognised.
#   aliases:  other spellings of the canonical key itself (case-insensitive)
#   groups:   section.group values belonging to the feature area
#   paths:    path prefixes belonging to the feature area
#   prefixes: key prefixes belonging to the feature area
SECTION_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    ATTENDANCE_KEY: {
        'aliases': (
            'attendanceOverview',
            'attendanceManagement',
            'attendance-management',
            'attendance_management',
            'attendance-overview',
            'attendance_overview',
            'quan-ly-cham-cong',
            'chamCong',
        ),
        'groups': ('attendance',),
        'paths': ('quan-ly-cham-cong',),
        'prefixes': ('attendance',),
    },
}

# Used whenever the database catalog is unavailable
FALLBACK_SECTIONS: List[Dict[str, object]] = [
    {'key': 'overview', 'label': 'Tổng quan', 'path': 'tong-quan', 'group': None},
    {'key': 'departments', 'label': 'Quản lý bộ phận', 'path': 'quan-ly-bo-phan', 'group': None},
    {'key': 'employeesOverview', 'label': 'Tổng quan nhân viên', 'path': 'quan-ly-nhan-vien/tong-quan-nhan-vien', 'group': 'employees'},
    {'key': 'employees', 'label': 'Danh sách nhân viên', 'path': 'quan-ly-nhan-vien/danh-sach-nhan-vien', 'group': 'employees'},
    {'key': 'employeeAccounts', 'label': 'Quản lý tài khoản', 'path': 'quan-ly-nhan-vien/quan-ly-tai-khoan', 'group': 'employees'},
    {'key': 'attendance', 'label': 'Tổng quan chấm công', 'path': 'quan-ly-cham-cong', 'group': 'attendance'},
    {'key': 'attendanceDailyReport', 'label': 'Báo cáo chấm công theo ngày', 'path': 'quan-ly-cham-cong/bao-cao-ngay', 'group': 'attendance'},
    {'key': 'attendanceWeeklyReport', 'label': 'Báo cáo chấm công theo tuần', 'path': 'quan-ly-cham-cong/bao-cao-tuan', 'group': 'attendance'},
    {'key': 'attendanceMonthlyReport', 'label': 'Báo cáo chấm công theo tháng', 'path': 'quan-ly-cham-cong/bao-cao-thang', 'group': 'attendance'},
    {'key': 'attendanceEdit', 'label': 'Chỉnh sửa chấm công', 'path': 'quan-ly-cham-cong/chinh-sua', 'group': 'attendance'},
    {'key': 'shiftOverview', 'label': 'Tổng quan ca làm', 'path': 'quan-ly-ca-lam/tong-quan-ca-lam', 'group': 'shift'},
    {'key': 'shifts', 'label': 'Ca làm', 'path': 'quan-ly-ca-lam/ca-lam', 'group': 'shift'},
    {'key': 'shiftAssignment', 'label': 'Phân ca', 'path': 'quan-ly-ca-lam/phan-ca', 'group': 'shift'},
    {'key': 'permissions', 'label': 'Phân quyền', 'path': 'quan-ly-chuc-vu/phan-quyen', 'group': 'roles'},
    {'key': 'roles', 'label': 'Chức vụ', 'path': 'quan-ly-chuc-vu/chuc-vu', 'group': 'roles'},
]

FALLBACK_ROLES: List[Dict[str, object]] = [
    {'key': 'ADMIN', 'name': 'Admin', 'isDirector': True},
    {'key': 'DIRECTOR', 'name': 'Giám đốc', 'isDirector': True},
    {'key': 'MANAGER', 'name': 'Trưởng phòng', 'isDirector': False},
    {'key': 'ACCOUNTANT', 'name': 'Kế toán', 'isDirector': False},
    {'key': 'SUPERVISOR', 'name': 'Giám sát', 'isDirector': False},
    {'key': 'EMPLOYEE', 'name': 'Nhân viên', 'isDirector': False},
    {'key': 'TEMPORARY', 'name': 'Thời vụ', 'isDirector': False},
]

# Built-in grants for roles without server-stored access. Locked roles are
# handled separately and never listed here.
DEFAULT_ROLE_SECTIONS: Dict[str, List[str]] = {
    'MANAGER': ['overview', 'employeesOverview', 'employees', 'attendance'],
    'ACCOUNTANT': ['overview', 'employees', 'attendance'],
    'SUPERVISOR': ['employees', 'attendance', 'shiftOverview'],
    'EMPLOYEE': ['attendance'],
    'TEMPORARY': [],
}
