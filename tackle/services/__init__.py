"""服务层: 组合核心组件，供 CLI 使用"""
