SUBJECT_TOPICS = {
    "DBMS": [
        "ER Model", "Relational Model", "Normalization (1NF, 2NF, 3NF, BCNF)",
        "SQL Queries", "Joins", "Transactions & ACID",
        "Concurrency Control", "Indexing & Hashing", "Deadlock",
        "Views & Triggers", "Stored Procedures", "NoSQL Basics",
    ],
    "C Programming": [
        "Variables & Data Types", "Operators", "Control Structures (if/else, switch)",
        "Loops (for, while, do-while)", "Functions", "Arrays",
        "Pointers", "Strings", "Structures & Unions",
        "File Handling", "Dynamic Memory Allocation", "Preprocessor Directives",
    ],
    "Java": [
        "OOP Concepts", "Classes & Objects", "Inheritance",
        "Polymorphism", "Abstraction & Interfaces", "Exception Handling",
        "Collections Framework", "Multithreading", "Generics",
        "File I/O", "JDBC", "Lambda Expressions & Streams",
    ],
    "Python": [
        "Variables & Data Types", "Control Flow", "Functions & Scope",
        "Lists, Tuples, Sets, Dicts", "String Operations", "File Handling",
        "OOP in Python", "Exception Handling", "List Comprehensions",
        "Decorators & Generators", "Modules & Packages", "Regular Expressions",
    ],
    "Data Structures": [
        "Arrays & Strings", "Linked Lists", "Stacks",
        "Queues", "Trees (Binary, BST, AVL)", "Heaps & Priority Queues",
        "Graphs", "Hashing", "Tries",
        "Segment Trees", "Disjoint Set Union", "Advanced Trees (B-Tree, Red-Black)",
    ],
    "Algorithms": [
        "Time & Space Complexity", "Sorting Algorithms", "Searching Algorithms",
        "Recursion & Backtracking", "Divide and Conquer", "Greedy Algorithms",
        "Dynamic Programming", "Graph Algorithms (BFS, DFS)", "Shortest Path Algorithms",
        "Minimum Spanning Tree", "String Matching", "NP-Completeness",
    ],
    "Operating Systems": [
        "Process Management", "Threads", "CPU Scheduling",
        "Process Synchronization", "Deadlocks", "Memory Management",
        "Virtual Memory & Paging", "File Systems", "Disk Scheduling",
        "I/O Systems", "System Calls", "Inter-Process Communication",
    ],
    "Computer Networks": [
        "OSI Model", "TCP/IP Model", "Data Link Layer & MAC",
        "IP Addressing & Subnetting", "Routing Protocols", "TCP vs UDP",
        "DNS", "HTTP & HTTPS", "Network Security & Firewalls",
        "Wireless Networks", "Socket Programming", "Congestion Control",
    ],
    "Aptitude": [
        "Number System", "Percentages", "Profit & Loss",
        "Ratio & Proportion", "Time & Work", "Time, Speed & Distance",
        "Probability", "Permutations & Combinations", "Averages",
        "Simple & Compound Interest", "Algebra", "Logical Reasoning",
    ],
    "System Design": [
        "Scalability Basics", "Load Balancing", "Caching Strategies",
        "Database Sharding", "CAP Theorem", "Microservices",
        "Message Queues", "API Design (REST/GraphQL)", "CDN",
        "Rate Limiting", "Design Patterns", "System Design Case Studies",
    ],
}
