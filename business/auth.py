"""操作员登录。

- 密码以 Base64(SHA-512) 形式保存与比较
- 每次登录尝试（成功或失败）都写入登录记录：时间、用户名、是否成功
- 登录成功后查询该用户即将开始的预约，用于登录提示
"""
import base64
import hashlib
import hmac
from datetime import datetime, tzinfo
from typing import Callable, List, Optional

from loguru import logger

from .errors import DataAccessFailure
from .records import Appointment, User, utc_now


def hash_password(password: str) -> str:
    """计算密码哈希：Base64(SHA-512(utf-8 密码))。"""
    digest = hashlib.sha512(password.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), password_hash)


class LoginService:
    """登录服务

    Attributes:
        users: 用户仓库，提供 ``find_credentials(name)``。
        appointments: 预约仓库，提供 ``upcoming_for_user(...)``。
        window_minutes: 登录提示的时间窗口（分钟）。
    """

    def __init__(self, users, appointments, window_minutes: int = 15,
                 clock: Callable[[], datetime] = utc_now) -> None:
        self.users = users
        self.appointments = appointments
        self.window_minutes = window_minutes
        self._clock = clock

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """校验用户名与密码。

        Args:
            username: 用户名（去除首尾空白）。
            password: 明文密码。

        Returns:
            登录成功返回用户，否则返回 None。
        """
        username = username.strip()
        user = None
        try:
            found = self.users.find_credentials(username) if username else None
        except DataAccessFailure as e:
            logger.error(f"登录查询失败: {e}")
            found = None

        if found is not None:
            candidate, password_hash = found
            if verify_password(password, password_hash):
                user = candidate

        self._record_attempt(username, user is not None)
        return user

    def _record_attempt(self, username: str, success: bool) -> None:
        attempted_at = self._clock().isoformat()
        logger.bind(
            login_activity=True,
            attempted_at=attempted_at,
            username=username,
            success=success,
        ).info("login attempt")
        if success:
            logger.info(f"用户 {username} 登录成功")
        else:
            logger.warning(f"用户 {username!r} 登录失败")

    def upcoming(self, user: User) -> List[Appointment]:
        """查询用户在接下来 ``window_minutes`` 分钟内开始的预约。

        查询失败时返回空列表（已记录日志）。
        """
        try:
            return self.appointments.upcoming_for_user(
                user.id, self._clock(), self.window_minutes
            )
        except DataAccessFailure as e:
            logger.error(f"查询即将开始的预约失败: {e}")
            return []

    def upcoming_notice(self, user: User, tz: tzinfo) -> str:
        """生成登录提示文本。

        Args:
            user: 已登录用户。
            tz: 显示时区。
        """
        upcoming = self.upcoming(user)
        if not upcoming:
            return "There are no upcoming appointments."
        lines = [f"Upcoming appointments within {self.window_minutes} minutes:"]
        for appointment in upcoming:
            start = appointment.start.astimezone(tz)
            lines.append(
                f"  #{appointment.id} {appointment.title} at "
                f"{start:%Y-%m-%d %H:%M}"
            )
        return "\n".join(lines)
