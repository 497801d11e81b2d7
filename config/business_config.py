"""
种子数据配置 - 支持可替换的基础数据

新部署可以实现自己的 SeedConfig，替换默认的国家/行政区/联系人/用户。
用户密码以 Base64(SHA-512) 形式保存，见 business.auth.hash_password。
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


class SeedConfig(ABC):
    """种子数据抽象基类"""

    @abstractmethod
    def get_countries(self) -> List[str]:
        """获取国家列表"""
        pass

    @abstractmethod
    def get_divisions(self) -> Dict[str, List[str]]:
        """获取一级行政区，按国家分组"""
        pass

    @abstractmethod
    def get_contacts(self) -> List[Dict[str, Any]]:
        """获取联系人列表（name, email）"""
        pass

    @abstractmethod
    def get_users(self) -> List[Dict[str, Any]]:
        """获取用户列表（name, password 明文，写入时哈希）"""
        pass


class DefaultSeedConfig(SeedConfig):
    """默认种子数据：美国、英国、加拿大三个国家"""

    def get_countries(self) -> List[str]:
        return ["U.S", "UK", "Canada"]

    def get_divisions(self) -> Dict[str, List[str]]:
        return {
            "U.S": [
                "Alabama", "Arizona", "California", "Colorado", "Florida",
                "Georgia", "Idaho", "Illinois", "New York", "Texas",
                "Washington",
            ],
            "UK": ["England", "Wales", "Scotland", "Northern Ireland"],
            "Canada": [
                "Alberta", "British Columbia", "Manitoba", "Ontario", "Québec",
            ],
        }

    def get_contacts(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Anika Costa", "email": "acoxta@company.com"},
            {"name": "Daniel Garcia", "email": "dgarcia@company.com"},
            {"name": "Li Lee", "email": "llee@company.com"},
        ]

    def get_users(self) -> List[Dict[str, Any]]:
        return [
            {"name": "test", "password": "test"},
            {"name": "admin", "password": "admin"},
        ]


# 全局种子数据实例（可以在 scripts/init_db.py 中替换）
seed_config: SeedConfig = DefaultSeedConfig()
