"""
数据模型包 (Data Models Package)

集中导出所有 SQLAlchemy ORM 模型：用户、商品、反馈和审计日志。
Centrally exports all SQLAlchemy ORM models: users, products, feedback and audit logs.
"""
from app.models.user import User
from app.models.product import Product
from app.models.feedback import Feedback
from app.models.audit_log import AuditLog

__all__ = ["User", "Product", "Feedback", "AuditLog"]
