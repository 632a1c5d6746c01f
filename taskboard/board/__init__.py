"""看板核心：任务状态、项目筛选排序、变更协调"""
