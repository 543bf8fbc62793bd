"""
路由模块包 (Router Module Package)

本包包含反馈服务后端 API 的所有路由模块，按功能域进行组织。

路由模块组织结构 (Router Module Organization):
- auth.py: 注册、邮箱验证、登录、密码重置、当前用户
- users.py: 用户管理（查询、编辑、删除）
- products.py: 商品查询与管理
- feedbacks.py: 反馈提交、修改、删除与查询
- audit_logs.py: 审计日志查询（仅管理员）

路由注册:
所有路由模块在 main.py 中通过 app.include_router() 统一注册，使用 /api/v1/ 前缀。
"""
